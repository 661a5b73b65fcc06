import json
from operator import attrgetter

from .cache import Cache as _Cache
from .serializable import Serializable, print_tree


# export namespace
Cache = _Cache


class Snapshot(Serializable):
    def __init__(self, metadata, caches):
        self.metadata = metadata
        self.caches = caches


    @classmethod
    def from_json(cls, obj):
        caches = [ Cache.from_json(c) for c in obj['caches'] ]
        return cls(obj['metadata'], caches)


    def to_json(self, out, **kwargs):
        return json.dump(self, out, default=attrgetter('__dict__'), **kwargs)
