"""Tests for the Flask front-end bridge."""

import queue
import threading

import numpy as np
import pytest

import server
from simulation import Simulation


@pytest.fixture
def client():
    server.app.config["TESTING"] = True
    with server.app.test_client() as client:
        yield client
    server._stop_worker()


def start(client, **overrides):
    body = {"seed": 5, "animals": 4, "foods": 8, "stepsPerGen": 3}
    body.update(overrides)
    return client.post("/start", json=body)


def test_start_reports_config(client):
    response = start(client)

    assert response.status_code == 200
    cfg = response.get_json()["cfg"]
    assert cfg["num_animals"] == 4
    assert cfg["generation_length"] == 3
    assert cfg["autorun"] is False


def test_step_emits_stats_on_generation_boundary(client):
    start(client)

    bodies = [client.post("/step").get_json() for _ in range(3)]

    assert [b["stats"] is None for b in bodies] == [True, True, False]
    assert bodies[-1]["generation"] == 1
    assert set(bodies[-1]["stats"]) == {"min_fitness", "max_fitness", "avg_fitness"}


def test_train_finishes_generation(client):
    start(client)
    client.post("/step")

    body = client.post("/train").get_json()

    assert body["generation"] == 1
    assert body["stats"]["max_fitness"] >= body["stats"]["min_fitness"]


def test_world_snapshot(client):
    start(client)

    body = client.get("/world").get_json()

    assert len(body["animals"]) == 4
    assert len(body["foods"]) == 8
    assert body["age"] == 0


def test_bad_config_is_rejected(client):
    response = start(client, animals="many")

    assert response.status_code == 400
    assert response.get_json()["status"] == "error"


def test_zero_animals_is_rejected(client):
    assert start(client, animals=0).status_code == 400


def test_status(client):
    start(client)

    body = client.get("/status").get_json()

    assert body["running"] is False
    assert body["cfg"]["seed"] == 5


@pytest.fixture
def worker_status():
    """Fake a background run in progress; restore idle status afterwards."""
    token = object()
    with server._status_lock:
        server._active_worker = token
        server._sim_status["running"] = True
        server._sim_status["generation"] = 0
    yield token
    with server._status_lock:
        server._active_worker = None
        server._sim_status["running"] = False
        server._sim_status["generation"] = 0


def run_worker(token, generations=1):
    rng = np.random.default_rng(3)
    sim = Simulation.random(rng, num_animals=3, num_foods=4, generation_length=2)
    out_q = queue.Queue()
    server._sim_worker(sim, rng, generations, threading.Event(), out_q, token)
    return [out_q.get_nowait() for _ in range(out_q.qsize())]


def test_current_worker_clears_running(worker_status):
    frames = run_worker(worker_status)

    assert server._sim_status["running"] is False
    assert server._sim_status["generation"] == 1
    assert [f["type"] for f in frames] == ["generation", "done"]


def test_replaced_worker_leaves_status_alone(worker_status):
    frames = run_worker(object())

    assert server._sim_status["running"] is True
    assert server._sim_status["generation"] == 0
    assert frames[-1] == {"type": "done", "gen": 0}


def test_autorun_start_reports_running_immediately(client):
    body = start(client, autorun=True, maxGenerations=100000).get_json()
    assert body["status"] == "started"

    assert client.get("/status").get_json()["running"] is True
