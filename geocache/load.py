#!/usr/bin/env python3

import csv
import json
import sys
import argparse
import io
import logging
from datetime import datetime

import brotli
import numpy as np

from geocache.datatypes import Snapshot, print_tree
from geocache.store import GeoStore, CacheStore, GLOBE, StoreError, StructuralLimitError
from geocache.util.quadtree import DEFAULT_CAPACITY, DEFAULT_MAX_LEVEL


def parse_row(i, line, tag_separator=None):
    '''
    Turn a raw row into a dict with float coordinates. Logs and returns None
    if the row lacks a field or its coordinates are not numbers.
    '''
    try:
        tags = line.get('tags')
        if tag_separator is not None:
            tags = [ t for t in (tags or '').split(tag_separator) if len(t) > 0 ]
        elif tags is None:
            tags = []
        return dict(
            name=line['name'],
            lat=float(line['lat']),
            long=float(line['long']),
            tags=list(tags),
            )
    except (KeyError, ValueError, TypeError, AttributeError) as err:
        name = line.get('name') if isinstance(line, dict) else None
        logging.error('  Row %s (%s) is malformed: %s %s', i, name, type(err).__name__, err)
        return None


def load_rows(f):
    '''
    Read cache rows from a JSON list, a CSV file with a name,lat,long,tags
    header or a brotli compressed snapshot. Returns a list of dicts with keys
    name, lat, long and tags, or None if any row could not be parsed.
    '''
    logging.info('Loading source data from %s', f.name)

    raw = f.read()
    if f.name.endswith('.br'):
        obj = json.loads(brotli.decompress(raw))
        rows = Snapshot.from_json(obj).caches
        rows = [ dict(name=c.name, lat=c.lat, long=c.long, tags=sorted(c.tags)) for c in rows ]

    elif f.name.endswith('.csv'):
        reader = csv.DictReader(io.StringIO(raw.decode('utf-8')))
        rows = [ parse_row(i, line, tag_separator=';') for i, line in enumerate(reader) ]

    else:
        rows = [ parse_row(i, line) for i, line in enumerate(json.loads(raw.decode('utf-8'))) ]

    malformed = sum(1 for r in rows if r is None)
    if malformed > 0:
        logging.error('  %s of %s rows are malformed.', malformed, len(rows))
        return None

    logging.info('  Loaded %s rows.', len(rows))
    return rows


def check_coordinates(rows):
    if len(rows) == 0:
        return False

    coords = np.array([ (r['lat'], r['long']) for r in rows ], dtype=float)
    unwell = np.flatnonzero(~np.isfinite(coords).all(axis=1))

    for i in unwell:
        logging.error('  Row %s (%s) has invalid coordinates %s/%s', i, rows[i]['name'], rows[i]['lat'], rows[i]['long'])

    return len(unwell) > 0


def populate(store, rows):
    logging.info('Creating caches.')

    ids = []
    for row in rows:
        try:
            ids.append(store.create(row['name'], row['lat'], row['long'], row['tags']))
        except (StoreError, StructuralLimitError) as err:
            logging.error('  Skipping %s: %s', row['name'], err)

    logging.info('  Created %s caches.', len(ids))
    return ids


def create_snapshot(store, geostore, ids):
    logging.info('Creating snapshot.')
    metadata = dict(
            created=datetime.now().strftime('%Y%m%dT%H%M%S'),
            count=len(ids),
            **geostore.stats(),
            )
    return Snapshot(metadata, [ store.get_by_id(id) for id in ids ])


def write_snapshot(snapshot, out):
    bytesio = io.StringIO()
    snapshot.to_json(bytesio)
    json_data = bytesio.getvalue().encode('utf-8')
    sz1 = len(json_data)
    logging.info('  Created JSON (~%.1fKiB)', sz1/1024)
    compressed = brotli.compress(json_data, brotli.MODE_TEXT)
    sz2 = len(compressed)
    logging.info('  Compressed to ~%.1fKiB (%.1fx)', sz2/1024, sz1/sz2)

    logging.info('Writing snapshot to %s', out.name)
    out.write(compressed)


def parse_floats(s, n):
    values = [ float(v) for v in s.split(',') ]
    if len(values) != n:
        raise argparse.ArgumentTypeError(F'Expected {n} comma separated numbers, got "{s}"')
    return values


def build_parser():
    parser = argparse.ArgumentParser(description='Load caches into an in-memory geo store and query it')
    parser.add_argument('input', metavar='<input>', help='Cache rows (.json, .csv or .br snapshot)', type=argparse.FileType('rb'))
    parser.add_argument('--out', metavar='<snapshot>', help='Write a brotli compressed snapshot', type=argparse.FileType('wb'))
    parser.add_argument('--plot', metavar='<png>', help='Render the quadtree to an image')
    parser.add_argument('--nearest', metavar='LAT,LONG', help='Log the caches near a point', type=lambda s: parse_floats(s, 2))
    parser.add_argument('--tags', metavar='T1,T2', help='Log the caches carrying any of the tags', type=lambda s: s.split(','))
    parser.add_argument('--region', metavar='LONG_MIN,LAT_MIN,LONG_MAX,LAT_MAX', help='Indexed region in GPS degrees',
            type=lambda s: parse_floats(s, 4), default=list(GLOBE))
    parser.add_argument('--capacity', help='Points per quadtree leaf', type=int, default=DEFAULT_CAPACITY)
    parser.add_argument('--max-level', help='Maximum quadtree depth', type=int, default=DEFAULT_MAX_LEVEL)
    parser.add_argument('--print', help='Print the snapshot tree to stdout', action='store_true', dest='print_tree')
    parser.add_argument('--log-level', help='Log level', default='info',
            choices=['debug', 'info', 'warning', 'error'])
    return parser


def main(argv=None):
    parsed = build_parser().parse_args(sys.argv[1:] if argv is None else argv)

    logging.basicConfig(format='%(asctime)s %(levelname)8s  %(message)s',
            level=getattr(logging, parsed.log_level.upper()),
            datefmt='%H:%M:%S')

    with parsed.input as f:
        rows = load_rows(f)
    if rows is None or check_coordinates(rows):
        return 1

    geostore = GeoStore.for_region(*parsed.region, capacity=parsed.capacity, max_level=parsed.max_level)
    store = CacheStore(geostore)
    ids = populate(store, rows)

    leaf = None
    if parsed.nearest is not None:
        lat, long = parsed.nearest
        logging.info('Caches near %s/%s:', lat, long)
        try:
            for cache in store.find_nearest(lat, long):
                logging.info('  %s', cache)
        except StoreError as err:
            logging.error('  %s', err)
        leaf = geostore.find_leaf(lat, long)

    if parsed.tags is not None:
        logging.info('Caches tagged %s:', ', '.join(parsed.tags))
        for cache in store.get_by_tags(parsed.tags):
            logging.info('  %s', cache)

    if parsed.out is not None or parsed.print_tree:
        snapshot = create_snapshot(store, geostore, ids)
        if parsed.print_tree:
            print_tree(snapshot)
        if parsed.out is not None:
            with parsed.out as out:
                write_snapshot(snapshot, out)

    if parsed.plot is not None:
        from geocache.util.plot_quadtree import plot_quadtree
        logging.info('Rendering quadtree to %s', parsed.plot)
        with geostore.lock.read():
            plot_quadtree(geostore.root, highlight=leaf, out=parsed.plot)

    logging.info('Done')
    return 0


if __name__ == '__main__':
    sys.exit(main())
