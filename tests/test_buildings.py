import random

import pytest
import requests

from floodscene import buildings
from floodscene.buildings import (BuildingLayer, build_building_layer,
                                  building_height, building_label,
                                  load_buildings, parse_levels,
                                  parse_osm_elements)
from floodscene.constants import CENTER_LAT, CENTER_LON
from floodscene.models import BuildingRecord, Coordinate, SceneConfig

from conftest import FakeResponse, FixedRandom


def _square_elements(way_id=100, tags=None, first_node=1):
    size = 0.0004
    corners = [(CENTER_LAT, CENTER_LON), (CENTER_LAT, CENTER_LON + size),
               (CENTER_LAT + size, CENTER_LON + size), (CENTER_LAT + size, CENTER_LON)]
    nodes = [{'type': 'node', 'id': first_node + i, 'lat': lat, 'lon': lon}
             for i, (lat, lon) in enumerate(corners)]
    ids = [n['id'] for n in nodes]
    way = {'type': 'way', 'id': way_id, 'nodes': ids + [ids[0]],
           'tags': tags if tags is not None else {'building': 'yes'}}
    return nodes + [way]


@pytest.mark.parametrize("value, expected", [
    ("5", 5), ("3 floors", 3), ("5.5", 5), (" 2", 2),
    ("abc", 0), ("", 0), (None, 0), (7, 7),
])
def test_parse_levels(value, expected):
    assert parse_levels(value) == expected


def test_height_from_levels():
    assert building_height({'building': 'yes', 'building:levels': '5'}) == 20.0
    assert building_height({'building': 'yes', 'building:levels': '3 floors'}) == 12.0


@pytest.mark.parametrize("levels", ["abc", "0", "-2", None])
def test_height_falls_back_to_random_range(levels):
    tags = {'building': 'yes'}
    if levels is not None:
        tags['building:levels'] = levels
    rng = random.Random(42)
    for _ in range(50):
        height = building_height(tags, rng)
        assert 6.0 <= height <= 18.0


def test_named_building_is_at_least_25m():
    tags = {'building': 'yes', 'name': 'Hospital'}
    assert building_height(tags, FixedRandom(7.0)) == 25.0

    tall = dict(tags, **{'building:levels': '10'})
    assert building_height(tall) == 40.0


def test_label_precedence():
    assert building_label({'name:en': 'Temple', 'name': 'วัด', 'name:th': 'วัดไทย'}) == 'วัดไทย'
    assert building_label({'name:en': 'Temple', 'name': 'วัด'}) == 'วัด'
    assert building_label({'name:en': 'Temple'}) == 'Temple'
    assert building_label({'name': ''}) is None
    assert building_label({}) is None


def test_parse_resolves_ways_and_skips_the_rest():
    elements = _square_elements(100, {'building': 'yes', 'building:levels': '2'})
    elements += [
        # Not a building
        {'type': 'way', 'id': 200, 'nodes': [1, 2, 3], 'tags': {'highway': 'path'}},
        # Only two of its nodes exist
        {'type': 'way', 'id': 300, 'nodes': [1, 2, 999, 998], 'tags': {'building': 'yes'}},
        {'type': 'relation', 'id': 400, 'tags': {'building': 'yes'}},
    ]
    records = parse_osm_elements(elements)
    assert [r.osm_id for r in records] == [100]
    rec = records[0]
    assert rec.height == 8.0
    assert rec.label is None
    assert rec.points[0] == Coordinate(CENTER_LAT, CENTER_LON)
    assert len(rec.points) == 5


def test_parse_keeps_way_with_missing_nodes_when_three_remain():
    elements = _square_elements(100)
    elements[-1]['nodes'].insert(2, 12345)
    records = parse_osm_elements(elements, FixedRandom(9.0))
    assert len(records) == 1
    assert records[0].height == 9.0


def test_layer_places_label_above_roof(projection):
    rec = BuildingRecord(
        osm_id=7,
        points=[Coordinate(lat, lon) for lat, lon in [
            (CENTER_LAT, CENTER_LON), (CENTER_LAT, CENTER_LON + 0.0004),
            (CENTER_LAT + 0.0004, CENTER_LON + 0.0004), (CENTER_LAT + 0.0004, CENTER_LON)]],
        tags={'building': 'yes', 'name': 'ศาลากลาง'},
        height=25.0,
        label='ศาลากลาง',
    )
    plain = BuildingRecord(osm_id=8, points=rec.points, tags={'building': 'yes'}, height=10.0)
    layer = build_building_layer([rec, plain], projection)

    assert [name for name, _ in layer.meshes] == ['building_7', 'building_8']
    assert [name for name, _ in layer.sprites] == ['label_7']

    mesh = layer.meshes[0][1]
    assert mesh.bounds[1][1] == pytest.approx(25.0)
    assert mesh.metadata['osm_id'] == 7

    sprite = layer.sprites[0][1]
    center = mesh.bounds.mean(axis=0)
    assert sprite.position[0] == pytest.approx(center[0])
    assert sprite.position[1] == pytest.approx(45.0)
    assert sprite.position[2] == pytest.approx(center[2])


def test_layer_skips_degenerate_footprints(projection):
    rec = BuildingRecord(osm_id=1, points=[Coordinate(CENTER_LAT, CENTER_LON)] * 3,
                         tags={'building': 'yes'}, height=10.0)
    layer = build_building_layer([rec], projection)
    assert layer.meshes == ()
    assert layer.success


def test_load_buildings_posts_overpass_query(monkeypatch, projection):
    calls = []

    def fake_post(url, data=None, headers=None, timeout=None):
        calls.append((url, data))
        return FakeResponse({'elements': _square_elements(5, {'building': 'yes', 'name': 'A'})})

    monkeypatch.setattr(buildings.requests, 'post', fake_post)
    config = SceneConfig()
    layer = load_buildings(config, projection, FixedRandom(10.0))

    assert layer.success
    assert len(layer.meshes) == 1
    assert len(layer.sprites) == 1
    url, data = calls[0]
    assert 'around:450' in data['data']
    assert f"{CENTER_LAT},{CENTER_LON}" in data['data']


def test_load_buildings_failure_gives_empty_layer(monkeypatch, projection):
    def fake_post(*args, **kwargs):
        raise requests.ConnectionError("no route")

    monkeypatch.setattr(buildings.requests, 'post', fake_post)
    layer = load_buildings(SceneConfig(), projection)
    assert isinstance(layer, BuildingLayer)
    assert not layer.success
    assert layer.meshes == ()
    assert 'no route' in layer.error
