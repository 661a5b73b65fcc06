import logging
from collections import deque, namedtuple

# gps degrees are shifted into a non-negative space, the globe becomes [0,360]x[0,180]
LONG_OFFSET = 180
LAT_OFFSET = 90

DEFAULT_CAPACITY = 4
DEFAULT_MAX_LEVEL = 48

NW, NE, SW, SE = range(4)

# order in which the children of an internal node are tried on insert and lookup
LOOKUP_ORDER = (NW, NE, SW, SE)
# order in which the points of a full leaf are handed to its new children
SPLIT_ORDER = (NW, NE, SE, SW)


Node = namedtuple('Node', ('x', 'y', 'id'))


def gps_to_absolute(long, lat):
    return long + LONG_OFFSET, lat + LAT_OFFSET


def node_from_gps(long, lat, id):
    x, y = gps_to_absolute(long, lat)
    return Node(x, y, id)


class StructuralLimitError(Exception):
    '''A full leaf at the maximum level would have to subdivide again.'''

    def __init__(self, node, level):
        super().__init__(F'Cannot subdivide below level {level} to place node {node.id} at ({node.x}, {node.y})')
        self.node = node
        self.level = level


class Quadrant:
    def __init__(self, x0, y0, x1, y1):
        if x0 > x1 or y0 > y1:
            raise ValueError(F'Invalid quadrant bounds ({x0}, {y0}) - ({x1}, {y1})')

        self.x0 = x0
        self.y0 = y0
        self.x1 = x1
        self.y1 = y1


    @classmethod
    def from_gps(cls, long_min, lat_min, long_max, lat_max):
        x0, y0 = gps_to_absolute(long_min, lat_min)
        x1, y1 = gps_to_absolute(long_max, lat_max)
        return cls(x0, y0, x1, y1)


    def contains(self, x, y):
        return self.x0 <= x <= self.x1 and self.y0 <= y <= self.y1


    def split(self):
        '''
        Return the four sub-quadrants in NW, NE, SW, SE order. North is the
        upper half on the y axis, west the lower half on the x axis.
        '''
        xm = self.x0 + (self.x1 - self.x0) / 2
        ym = self.y0 + (self.y1 - self.y0) / 2

        return (
                Quadrant(self.x0, ym, xm, self.y1),
                Quadrant(xm, ym, self.x1, self.y1),
                Quadrant(self.x0, self.y0, xm, ym),
                Quadrant(xm, self.y0, self.x1, ym),
                )


    def __eq__(self, other):
        if not isinstance(other, Quadrant):
            return NotImplemented
        return (self.x0, self.y0, self.x1, self.y1) == (other.x0, other.y0, other.x1, other.y1)


    def __repr__(self):
        return F'Quadrant({self.x0}, {self.y0}, {self.x1}, {self.y1})'


class Quadtree:
    def __init__(self, quadrant, capacity=DEFAULT_CAPACITY, level=1, max_level=DEFAULT_MAX_LEVEL):
        if capacity < 1:
            raise ValueError(F'Quadtree capacity must be positive, got {capacity}')

        self.quadrant = quadrant
        self.capacity = capacity
        self.level = level
        self.max_level = max_level

        self.nodes = []
        self.children = None


    @property
    def subdivided(self):
        return self.children is not None


    @property
    def nw(self):
        return self.children[NW]


    @property
    def ne(self):
        return self.children[NE]


    @property
    def sw(self):
        return self.children[SW]


    @property
    def se(self):
        return self.children[SE]


    def insert(self, node):
        '''
        Place a node in the tree. Returns False if the node lies outside of
        this tree's quadrant.

        @raises StructuralLimitError    if placing the node would subdivide a
                                        leaf already at `max_level`. The tree
                                        is left unchanged in that case.
        '''
        if not self.quadrant.contains(node.x, node.y):
            return False

        if self.children is not None:
            return _insert_first(self.children, LOOKUP_ORDER, node)

        if len(self.nodes) < self.capacity:
            self.nodes.append(node)
            return True

        self._split(node)
        return True


    def _split(self, node):
        if self.level >= self.max_level:
            raise StructuralLimitError(node, self.level)

        children = [ Quadtree(q, self.capacity, self.level + 1, self.max_level) for q in self.quadrant.split() ]

        for n in self.nodes + [node]:
            _insert_first(children, SPLIT_ORDER, n)

        # link only after every point found a place, a failed split leaves this leaf as it was
        self.children = children
        self.nodes = []

        logging.debug('Split quadtree at level %s, %s', self.level, self.quadrant)


    def remove(self, node):
        '''
        Remove the entry carrying `node.id` from the leaf holding `node`'s
        point. Returns the leaf the entry was removed from, or None. Leaves are
        never merged back.
        '''
        if not self.quadrant.contains(node.x, node.y):
            return None

        if self.children is None:
            for i, n in enumerate(self.nodes):
                if n.id == node.id:
                    del self.nodes[i]
                    return self
            return None

        for child in self.children:
            leaf = child.remove(node)
            if leaf is not None:
                return leaf
        return None


    def find_leaf(self, x, y):
        '''
        Return the leaf a point at (x, y) would be inserted into, or None if
        the point lies outside of the tree.
        '''
        queue = deque([self])
        while queue:
            q = queue.popleft()

            if q.children is None:
                if q.quadrant.contains(x, y):
                    return q
                continue

            for idx in LOOKUP_ORDER:
                child = q.children[idx]
                if child.quadrant.contains(x, y):
                    queue.append(child)
                    break

        return None


    def leaves(self):
        stack = [self]
        while stack:
            q = stack.pop()
            if q.children is None:
                yield q
            else:
                stack.extend(reversed(q.children))


    def depth(self):
        return max(leaf.level for leaf in self.leaves())


    def __len__(self):
        return sum(len(leaf.nodes) for leaf in self.leaves())


    def __repr__(self):
        kind = 'internal' if self.children is not None else F'leaf, {len(self.nodes)} nodes'
        return F'Quadtree(level {self.level}, {self.quadrant}, {kind})'


def _insert_first(children, order, node):
    for idx in order:
        if children[idx].insert(node):
            return True
    return False
