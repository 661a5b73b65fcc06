class Serializable:

    @classmethod
    def from_json(cls, obj):
        return cls(**obj)


    def __str__(self):
        s = F'{type(self).__name__} @ {id(self)}\n'
        for k, v in self.__dict__.items():
            s += F'{k} -> {v}\n'

        return s


def print_tree(obj, indent=2, out=None):
    def emit(s, end='\n'):
        print(s, end=end, file=out)

    if type(obj) in (bool, str, int, float, complex):
        emit(F'({type(obj).__name__}) {obj}')
    elif obj is None:
        emit('None')
    elif type(obj) in (list, tuple, set, frozenset):
        emit(F'{type(obj).__name__}:')
        for k in obj:
            emit(' '*indent, end='')
            print_tree(k, indent=indent+2, out=out)
    else:
        if type(obj) is dict:
            d = obj
        else:
            d = obj.__dict__
        emit(F'{type(obj).__name__}:')
        for k, v in d.items():
            emit(' '*indent, end='')
            emit(F'{k} = ', end='')
            print_tree(v, indent=indent+2, out=out)
