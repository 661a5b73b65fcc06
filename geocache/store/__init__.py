from .errors import StoreError, CacheNotFoundError, InconsistentStoreError, StructuralLimitError
from .geostore import GeoStore, GLOBE
from .cachestore import CacheStore
