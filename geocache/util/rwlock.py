import threading
from contextlib import contextmanager


class RWLock:
    '''
    Many readers or a single writer. Waiting writers block new readers so a
    steady stream of lookups cannot starve an insert. Not re-entrant.
    '''
    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = None
        self._writers_waiting = 0
        self._local = threading.local()


    def held(self):
        '''True if the calling thread currently holds this lock in either mode.'''
        return getattr(self._local, 'depth', 0) > 0


    def _enter(self):
        if self.held():
            raise RuntimeError('RWLock is not re-entrant')
        self._local.depth = 1


    def _leave(self):
        self._local.depth = 0


    @contextmanager
    def read(self):
        self._enter()
        try:
            with self._cond:
                while self._writer is not None or self._writers_waiting > 0:
                    self._cond.wait()
                self._readers += 1
        except BaseException:
            self._leave()
            raise

        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()
            self._leave()


    @contextmanager
    def write(self):
        self._enter()
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer is not None or self._readers > 0:
                    self._cond.wait()
            except BaseException:
                # readers held back by this writer may go ahead
                self._writers_waiting -= 1
                self._cond.notify_all()
                self._leave()
                raise
            self._writers_waiting -= 1
            self._writer = threading.get_ident()

        try:
            yield
        finally:
            with self._cond:
                self._writer = None
                self._cond.notify_all()
            self._leave()
