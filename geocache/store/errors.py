from geocache.util.quadtree import StructuralLimitError


class StoreError(Exception):
    '''Base class of the errors the cache store raises to its callers.'''


class CacheNotFoundError(StoreError, KeyError):
    def __init__(self, id=None, name=None):
        super().__init__(id if id is not None else name)
        self.id = id
        self.name = name


    def __str__(self):
        return F'Cache not found; id={self.id}, name={self.name}'


class InconsistentStoreError(StoreError):
    '''The spatial index returned an id that has no record. This is a bug in the insert path.'''

    def __init__(self, id):
        super().__init__(F'Spatial index refers to unknown cache id {id}')
        self.id = id


__all__ = ['StoreError', 'CacheNotFoundError', 'InconsistentStoreError', 'StructuralLimitError']
