'''
geocache
========
In-memory store of named, tagged points ("caches") with exact, tag and
spatial lookup.

Package layout
--------------
geocache/
    datatypes/  – cache record and snapshot serialization
    store/      – spatial index (GeoStore), cache store, errors
    util/       – quadtree, reader/writer lock, quadtree rendering
    load.py     – batch loader script
'''

__version__ = '0.1.0'
