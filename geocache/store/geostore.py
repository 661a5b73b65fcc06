import logging

from geocache.util.quadtree import Quadtree, Quadrant, gps_to_absolute, \
        DEFAULT_CAPACITY, DEFAULT_MAX_LEVEL
from geocache.util.rwlock import RWLock


# long_min, lat_min, long_max, lat_max
GLOBE = (-180, -90, 180, 90)


class GeoStore:
    '''
    Spatial index over (long, lat) points carrying an id. Owns the quadtree
    root and guards it with its own lock. Knows nothing about caches, names or
    tags.
    '''
    def __init__(self, root=None):
        if root is None:
            root = Quadtree(Quadrant.from_gps(*GLOBE), DEFAULT_CAPACITY)

        self.root = root
        self.lock = RWLock()


    @classmethod
    def for_region(cls, long_min, lat_min, long_max, lat_max, capacity=DEFAULT_CAPACITY, max_level=DEFAULT_MAX_LEVEL):
        quadrant = Quadrant.from_gps(long_min, lat_min, long_max, lat_max)
        return cls(Quadtree(quadrant, capacity, max_level=max_level))


    def insert(self, node):
        with self.lock.write():
            placed = self.root.insert(node)

        if not placed:
            logging.warning('Point %s at (%s, %s) lies outside of the indexed region', node.id, node.x, node.y)
        return placed


    def remove(self, node):
        with self.lock.write():
            return self.root.remove(node)


    def restore(self, leaf, node):
        '''
        Put a removed node back into the leaf `remove` returned for it. The
        leaf's capacity is not checked, it held the node a moment ago.
        '''
        with self.lock.write():
            leaf.nodes.append(node)


    def find_leaf(self, lat, long):
        x, y = gps_to_absolute(long, lat)
        with self.lock.read():
            return self.root.find_leaf(x, y)


    def find_nearest(self, lat, long, max_distance=0, limit=0):
        '''
        Return the ids of all points sharing the leaf that (lat, long) would
        be inserted into. `max_distance` and `limit` are accepted but not
        applied.
        '''
        x, y = gps_to_absolute(long, lat)
        with self.lock.read():
            leaf = self.root.find_leaf(x, y)
            if leaf is None:
                return []
            return [ n.id for n in leaf.nodes ]


    def stats(self):
        with self.lock.read():
            q = self.root.quadrant
            return dict(
                    region=[q.x0, q.y0, q.x1, q.y1],
                    capacity=self.root.capacity,
                    points=len(self.root),
                    leaves=sum(1 for _ in self.root.leaves()),
                    depth=self.root.depth(),
                    )
