import random
import sys
import os

# include repository root
sys.path.insert(1, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', '..'))

import pytest

from geocache.util.quadtree import Quadtree, Quadrant, Node, StructuralLimitError, \
        gps_to_absolute, node_from_gps


canada_saskatchewan = node_from_gps(-106.72319029988779, 53.61760431337473, 1)
canada_edmonton = node_from_gps(-113.37174481536333, 53.678868921462815, 6)
canada_drayton_valley = node_from_gps(-114.99135644079897, 53.222683424857216, 7)
canada_red_deer = node_from_gps(-113.80500041394141, 52.26871035649865, 8)
canada_calgary = node_from_gps(-114.06243444911559, 51.04653767382061, 9)
peru = node_from_gps(-72.27006768132226, -36.351849320377774, 2)
australia = node_from_gps(124.42913747263096, -23.605766549164937, 3)
mongolia = node_from_gps(97.00726436805842, 46.88910832340091, 4)
oregon = node_from_gps(-120.54074440145642, 43.38552157601114, 5)

test_nodes = [
        canada_saskatchewan,
        canada_edmonton,
        canada_drayton_valley,
        canada_red_deer,
        canada_calgary,
        peru,
        australia,
        mongolia,
        oregon,
        ]


def globe(capacity=4, max_level=48):
    return Quadtree(Quadrant.from_gps(-180, -90, 180, 90), capacity, max_level=max_level)


def ids(nodes):
    return set(map(lambda n: n.id, nodes))


def all_nodes(tree):
    return [ n for leaf in tree.leaves() for n in leaf.nodes ]


def test_gps_to_absolute():
    assert gps_to_absolute(-150.0, 23.9) == (30, 113.9)


def test_in_quadrant():
    q = Quadrant.from_gps(-77.39510974768805, 38.99772147594664, -76.92407096188735, 39.298054420228155)
    inside = node_from_gps(-77.13281118183403, 39.113426782280676, 1)
    outside = node_from_gps(-77.49535998489928, 39.20021432781471, 2)

    assert q.contains(inside.x, inside.y)
    assert not q.contains(outside.x, outside.y)


def test_quadrant_bounds_are_inclusive():
    q = Quadrant(0, 0, 10, 10)
    for x, y in [(0, 0), (10, 10), (0, 10), (10, 0), (5, 0)]:
        assert q.contains(x, y)
    assert not q.contains(10.000001, 5)

    with pytest.raises(ValueError):
        Quadrant(10, 0, 0, 10)


def test_quadrant_split():
    nw, ne, sw, se = Quadrant(0, 0, 360, 180).split()
    assert nw == Quadrant(0, 90, 180, 180)
    assert ne == Quadrant(180, 90, 360, 180)
    assert sw == Quadrant(0, 0, 180, 90)
    assert se == Quadrant(180, 0, 360, 90)


def test_insert_node():
    q = globe()
    for n in [canada_saskatchewan, peru, australia, mongolia, oregon]:
        assert q.insert(n)

    assert q.subdivided
    assert q.nodes == []
    assert len(q.children) == 4
    assert ids(q.nw.nodes) == {1, 5}
    assert ids(q.ne.nodes) == {4}
    assert ids(q.sw.nodes) == {2}
    assert ids(q.se.nodes) == {3}
    assert all(c.level == 2 for c in q.children)


def test_insert_outside():
    q = globe()
    assert not q.insert(Node(400, 10, 1))
    assert not q.insert(Node(10, -1, 2))
    assert len(q) == 0


def test_leaf_fills_to_capacity():
    q = globe()
    for n in test_nodes[:4]:
        q.insert(n)

    assert not q.subdivided
    assert len(q.nodes) == 4


def test_find_nearest_canada():
    q = globe()
    for n in test_nodes:
        q.insert(n)

    x, y = gps_to_absolute(-114.69660872375789, 52.58987722297317)
    leaf = q.find_leaf(x, y)

    assert leaf is not None
    assert not leaf.subdivided
    assert leaf.quadrant.contains(x, y)
    assert ids(leaf.nodes) == {6, 7, 8, 9}


def test_find_leaf_outside():
    q = globe()
    assert q.find_leaf(-1, -1) is None

    for n in test_nodes:
        q.insert(n)
    assert q.find_leaf(361, 90) is None
    assert q.find_leaf(180, 181) is None


def test_split_keeps_every_point():
    q = Quadtree(Quadrant(0, 0, 100, 100), 4)
    rng = random.Random(7)
    inserted = []
    for i in range(400):
        n = Node(rng.uniform(0, 100), rng.uniform(0, 100), i)
        assert q.insert(n)
        inserted.append(n)

    stored = all_nodes(q)
    assert len(stored) == len(inserted)
    assert sorted(stored) == sorted(inserted)

    for leaf in q.leaves():
        assert len(leaf.nodes) <= 4
        assert leaf.children is None
        for n in leaf.nodes:
            assert leaf.quadrant.contains(n.x, n.y)


def test_lookup_finds_containing_leaf():
    q = Quadtree(Quadrant(0, 0, 100, 100), 3)
    rng = random.Random(11)
    for i in range(200):
        q.insert(Node(rng.uniform(0, 100), rng.uniform(0, 100), i))

    for _ in range(200):
        x, y = rng.uniform(0.001, 99.999), rng.uniform(0.001, 99.999)
        leaf = q.find_leaf(x, y)
        assert leaf is not None
        assert leaf.quadrant.contains(x, y)


def test_inserted_point_is_found_in_its_leaf():
    q = Quadtree(Quadrant(0, 0, 100, 100), 2)
    rng = random.Random(3)
    for i in range(100):
        n = Node(rng.uniform(0.001, 99.999), rng.uniform(0.001, 99.999), i)
        q.insert(n)
        assert n in q.find_leaf(n.x, n.y).nodes


def test_boundary_point_split_order():
    # a point on the vertical midline belongs to both NW and NE, the first tried wins
    q = Quadtree(Quadrant(0, 0, 100, 100), 1)
    q.insert(Node(10, 10, 1))
    q.insert(Node(50, 50, 2))

    assert ids(q.nw.nodes) == {2}
    assert ids(q.sw.nodes) == {1}

    # on the horizontal midline in the east the split order tries SE before SW
    q = Quadtree(Quadrant(0, 0, 100, 100), 1)
    q.insert(Node(75, 50, 1))
    q.insert(Node(50, 25, 2))

    assert ids(q.ne.nodes) == {1}
    assert ids(q.se.nodes) == {2}
    assert q.sw.nodes == []


def test_remove():
    q = globe()
    for n in test_nodes:
        q.insert(n)

    leaf = q.remove(canada_calgary)
    assert leaf is not None
    assert ids(leaf.nodes) == {6, 7, 8}
    assert q.remove(canada_calgary) is None
    assert 9 not in ids(all_nodes(q))
    assert len(q) == len(test_nodes) - 1

    # removal never merges leaves back
    assert q.subdivided


def test_coincident_points_hit_level_limit():
    q = Quadtree(Quadrant(0, 0, 100, 100), 2, max_level=6)
    q.insert(Node(10, 10, 1))
    q.insert(Node(10, 10, 2))

    with pytest.raises(StructuralLimitError) as excinfo:
        q.insert(Node(10, 10, 3))

    assert excinfo.value.node.id == 3
    assert excinfo.value.level == 6

    # the failed split leaves the tree as it was
    assert not q.subdivided
    assert ids(q.nodes) == {1, 2}
    assert q.depth() == 1


def test_level_limit_inside_subtree():
    q = Quadtree(Quadrant(0, 0, 100, 100), 2, max_level=4)
    q.insert(Node(90, 90, 1))
    q.insert(Node(10, 10, 2))
    q.insert(Node(10, 10, 3))
    assert q.subdivided

    before = sorted(all_nodes(q))
    with pytest.raises(StructuralLimitError):
        q.insert(Node(10, 10, 4))

    assert sorted(all_nodes(q)) == before
    assert q.depth() == 2


def test_depth_and_len():
    q = globe()
    for n in test_nodes:
        q.insert(n)

    assert len(q) == 9
    assert q.depth() == 5


if __name__ == '__main__':
    test_insert_node()
    test_find_nearest_canada()
    test_split_keeps_every_point()
