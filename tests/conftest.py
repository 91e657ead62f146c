import json

import pytest

from wildfire_map.loader import FireDataset, normalize_fires


# Day indexes below are relative to 2020-07-01 (index 0)
FIRE_ROWS = [
    {
        # A: discovered day 1 (afternoon), contained day 5
        'FIRE_NAME': 'Creek',
        'latitude': 38.5,
        'longitude': -121.0,
        'FIRE_SIZE': 1500.5,
        'DISCOVERY_DATETIME': '2020-07-02 14:30:00',
        'CONT_DATETIME': '2020-07-06 09:00:00',
        'FIRE_DURATION_DAYS': 3.8,
        'NWCG_GENERAL_CAUSE': 'Natural',
    },
    {
        # B: unnamed, discovered day 3, never contained, unknown duration
        'FIRE_NAME': None,
        'latitude': 34.2,
        'longitude': -118.3,
        'FIRE_SIZE': 250000,
        'DISCOVERY_DATETIME': '2020-07-04',
        'CONT_DATETIME': None,
        'FIRE_DURATION_DAYS': 0,
        'NWCG_GENERAL_CAUSE': 'Human',
    },
    {
        # C: bad latitude, never drawn but still anchors the date range
        'FIRE_NAME': 'Ghost',
        'latitude': 'n/a',
        'longitude': -119.0,
        'FIRE_SIZE': 5,
        'DISCOVERY_DATETIME': '2020-07-01',
        'CONT_DATETIME': None,
        'FIRE_DURATION_DAYS': 1,
        'NWCG_GENERAL_CAUSE': 'Human',
    },
    {
        # D: discovered day 5, long-running
        'FIRE_NAME': 'Late Fire',
        'latitude': 40.0,
        'longitude': -122.0,
        'FIRE_SIZE': 10,
        'DISCOVERY_DATETIME': '2020-07-06',
        'CONT_DATETIME': '2020-08-20',
        'FIRE_DURATION_DAYS': 45,
        'NWCG_GENERAL_CAUSE': 'Natural',
    },
]


def _square(x, y, size=1):
    return [[x, y], [size, 0], [0, size], [-size, 0], [0, -size]]


@pytest.fixture
def fire_rows():
    return [dict(r) for r in FIRE_ROWS]


@pytest.fixture
def dataset(fire_rows):
    return FireDataset(normalize_fires(fire_rows))


@pytest.fixture
def fires_file(tmp_path, fire_rows):
    path = tmp_path / 'fires.json'
    path.write_text(json.dumps(fire_rows), encoding='utf-8')
    return path


@pytest.fixture
def topology():
    """Quantised us-atlas style topology: '06' is a square polygon, '32' a one-part multipolygon."""
    return {
        'type': 'Topology',
        'transform': {'scale': [0.5, 0.5], 'translate': [-122.0, 36.0]},
        'objects': {
            'states': {
                'type': 'GeometryCollection',
                'geometries': [
                    {'type': 'Polygon', 'id': '06', 'properties': {'name': 'California'}, 'arcs': [[0]]},
                    {'type': 'MultiPolygon', 'id': '32', 'properties': {'name': 'Nevada'}, 'arcs': [[[1]]]},
                    {'type': None, 'id': '99'},
                ],
            }
        },
        'arcs': [_square(0, 0, 4), _square(6, 0, 2)],
    }


@pytest.fixture
def topology_file(tmp_path, topology):
    path = tmp_path / 'states.json'
    path.write_text(json.dumps(topology), encoding='utf-8')
    return path
