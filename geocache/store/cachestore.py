import logging

from geocache.datatypes import Cache
from geocache.util.quadtree import node_from_gps, StructuralLimitError
from geocache.util.rwlock import RWLock
from .errors import CacheNotFoundError, InconsistentStoreError


class CacheStore:
    '''
    In-memory store of caches with three indices: by id, by name and by tag.
    Points are fed into the bound GeoStore on create and update.

    Both the name and the tag index hold cache ids, so every lookup resolves
    through the id map and sees the current state of a cache.

    The store lock is always taken before the GeoStore's lock, never after.
    '''
    def __init__(self, geostore):
        self._caches = dict()
        self._by_name = dict()
        self._by_tag = dict()
        self._counter = 1

        self._geostore = geostore
        self._lock = RWLock()


    def _read(self):
        assert not self._geostore.lock.held(), 'geostore lock taken before store lock'
        return self._lock.read()


    def _write(self):
        assert not self._geostore.lock.held(), 'geostore lock taken before store lock'
        return self._lock.write()


    def create(self, name, lat, long, tags):
        tags = set(tags)

        with self._write():
            cache = Cache(self._counter, name, lat, long, tags)

            # may raise StructuralLimitError, nothing is registered before it succeeded
            self._geostore.insert(node_from_gps(long, lat, cache.id))

            self._counter += 1
            self._caches[cache.id] = cache

            if name in self._by_name:
                logging.warning('Cache name %s now refers to cache %s instead of %s', name, cache.id, self._by_name[name])
            self._by_name[name] = cache.id

            for tag in tags:
                self._by_tag.setdefault(tag, set()).add(cache.id)

        logging.debug('Created %s', cache)
        return cache.id


    def get_by_id(self, id):
        with self._read():
            cache = self._caches.get(id)
            if cache is None:
                raise CacheNotFoundError(id=id)
            return cache.copy()


    def get_by_name(self, name):
        with self._read():
            id = self._by_name.get(name)
            if id is None:
                raise CacheNotFoundError(name=name)
            return self._caches[id].copy()


    def get_by_tags(self, tags):
        '''Caches carrying any of `tags`, ordered by id.'''
        with self._read():
            ids = set()
            for tag in tags:
                ids.update(self._by_tag.get(tag, ()))

            return [ self._caches[id].copy() for id in sorted(ids) ]


    def find_nearest(self, lat, long, max_distance=0, limit=0):
        with self._read():
            ids = self._geostore.find_nearest(lat, long, max_distance, limit)

            result = []
            for id in ids:
                cache = self._caches.get(id)
                if cache is None:
                    raise InconsistentStoreError(id)
                result.append(cache.copy())

            return result


    def update(self, name, lat, long, tags):
        '''
        Move the cache called `name` to (lat, long) and replace its tags. The
        tag index and the spatial index follow the change.
        '''
        tags = set(tags)

        with self._write():
            id = self._by_name.get(name)
            if id is None:
                raise CacheNotFoundError(name=name)
            cache = self._caches[id]

            old = node_from_gps(cache.long, cache.lat, id)
            new = node_from_gps(long, lat, id)
            leaf = self._geostore.remove(old)
            try:
                self._geostore.insert(new)
            except StructuralLimitError:
                # a failed insert leaves the tree as it was, so the old leaf is still a leaf
                if leaf is not None:
                    self._geostore.restore(leaf, old)
                raise

            for tag in cache.tags - tags:
                ids = self._by_tag[tag]
                ids.discard(id)
                if len(ids) == 0:
                    del self._by_tag[tag]
            for tag in tags - cache.tags:
                self._by_tag.setdefault(tag, set()).add(id)

            cache.lat = lat
            cache.long = long
            cache.tags = tags

            logging.debug('Updated %s', cache)
            return cache.copy()


    def get_all(self):
        return []


    def delete(self, id):
        pass


    def delete_all(self):
        pass
