import time

import pytest
from fastapi.testclient import TestClient

from backend import config
from backend.app import app


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(config, 'OFFLINE', True)
    with TestClient(app) as client:
        yield client


def _wait_loaded(client, attempts=50):
    for _ in range(attempts):
        board = client.get("/api/dashboard").json()
        if not board['is_loading']:
            return board
        time.sleep(0.05)
    raise AssertionError("scene never finished loading")


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()['status'] == 'ok'


def test_dashboard(client):
    board = _wait_loaded(client)
    assert board['state'] == 'ready'
    assert board['loading_step'] == 4
    assert board['weather'] is None
    assert board['impact'] == []
    assert board['water_level'] == 0.0
    assert board['water_status'] == 'normal'


@pytest.mark.parametrize("level, status", [(0.0, 'normal'), (1.5, 'watch'), (2.5, 'critical')])
def test_set_water_level(client, level, status):
    response = client.put("/api/water-level", json={'level': level})
    assert response.status_code == 200
    body = response.json()
    assert body['level'] == level
    assert body['status'] == status
    assert client.get("/api/dashboard").json()['water_level'] == level


@pytest.mark.parametrize("level", [31, -0.5, 0.3])
def test_water_level_out_of_range(client, level):
    response = client.put("/api/water-level", json={'level': level})
    assert response.status_code == 422


def test_scene_glb(client):
    _wait_loaded(client)
    response = client.get("/api/scene.glb")
    assert response.status_code == 200
    assert response.headers['content-type'] == 'model/gltf-binary'
    assert response.content[:4] == b'glTF'
