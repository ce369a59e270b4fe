"""
EvoForage Server  –  Flask + Server-Sent Events
===============================================

Endpoints:
  POST /start        Create a fresh simulation from a JSON config body;
                     with "autorun": true it trains in the background
  POST /stop         Stop background training
  POST /step         Advance exactly one tick
  POST /train        Run the current generation to its end
  GET  /world        Current world snapshot as JSON
  GET  /stream       SSE stream – browser subscribes here for live data
  GET  /status       Current sim state as JSON

Run:
  python server.py
  # → http://localhost:5000
"""

import json
import logging
import queue
import threading

import numpy as np
from flask import Flask, Response, request, jsonify

from simulation import Simulation
from config import (
    NUM_ANIMALS, NUM_FOODS, GENERATION_LENGTH, MAX_GENERATIONS,
    MUTATION_CHANCE, MUTATION_COEFFICIENT, LOG_FORMAT,
)

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────────────
app = Flask(__name__)

# One simulation per process.  It is only ever touched while holding
# _sim_lock, so the engine itself stays single-threaded.
_sim:         Simulation | None = None
_rng:         np.random.Generator | None = None
_sim_lock     = threading.Lock()
_sim_thread:  threading.Thread | None = None
_stop_event   = threading.Event()
_gen_queue    = queue.Queue(maxsize=200)   # holds dicts to stream
_sim_status   = {
    "running":    False,
    "generation": 0,
    "max_gen":    0,
    "cfg":        {},
}
_status_lock  = threading.Lock()
# Token of the worker allowed to write _sim_status; guarded by _status_lock
_active_worker: object | None = None


# ──────────────────────────────────────────────────────────────────────────────
# CORS helper – allow a front-end dev server (any origin) to call us
# ──────────────────────────────────────────────────────────────────────────────

@app.after_request
def add_cors(response):
    response.headers["Access-Control-Allow-Origin"]  = "*"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    return response


@app.route("/", methods=["OPTIONS"])
@app.route("/<path:p>", methods=["OPTIONS"])
def preflight(p=""):
    return Response(status=200)


@app.errorhandler(ValueError)
def bad_request(err):
    return jsonify({"status": "error", "error": str(err)}), 400


# ──────────────────────────────────────────────────────────────────────────────
# Simulation thread
# ──────────────────────────────────────────────────────────────────────────────

def _build_cfg(data: dict) -> dict:
    """Merge request JSON with defaults."""
    try:
        seed = data.get("seed")
        return {
            "seed":            None if seed is None else int(seed),
            "num_animals":     int(data.get("animals",        NUM_ANIMALS)),
            "num_foods":       int(data.get("foods",          NUM_FOODS)),
            "generation_length": int(data.get("stepsPerGen",  GENERATION_LENGTH)),
            "max_generations": int(data.get("maxGenerations", MAX_GENERATIONS)),
            "mutation_chance": float(data.get("mutationChance", MUTATION_CHANCE)),
            "mutation_coefficient": float(data.get("mutationCoeff", MUTATION_COEFFICIENT)),
            "autorun":         bool(data.get("autorun", False)),
        }
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid config: {exc}") from exc


def _generation_payload(generation: int, stats, snapshot, max_gen: int) -> dict:
    return {
        "type":     "generation",
        "gen":      generation,
        "maxGen":   max_gen,
        "min":      round(stats.min_fitness, 4),
        "max":      round(stats.max_fitness, 4),
        "avg":      round(stats.avg_fitness, 4),
        "snapshot": snapshot.as_dict(),
    }


def _push(out_q: queue.Queue, payload: dict):
    # Non-blocking put; drop oldest frame if queue full
    if out_q.full():
        try:
            out_q.get_nowait()
        except queue.Empty:
            pass
    out_q.put(payload)


def _sim_worker(sim: Simulation, rng: np.random.Generator, max_gen: int,
                stop_evt: threading.Event, out_q: queue.Queue, token: object):
    """
    Train generation by generation; push each one into the queue.

    `token` identifies this worker.  A worker replaced by a newer /start
    keeps running on its own simulation until it notices its stop event,
    but it no longer writes to _sim_status.
    """
    try:
        for _ in range(max_gen):
            if stop_evt.is_set():
                break
            with _sim_lock:
                stats = sim.train(rng)
                generation = sim.generation
                snapshot = sim.world()
            with _status_lock:
                if _active_worker is token:
                    _sim_status["generation"] = generation
            _push(out_q, _generation_payload(generation, stats, snapshot, max_gen))
    finally:
        with _status_lock:
            if _active_worker is token:
                _sim_status["running"] = False
            generation = _sim_status["generation"]
        out_q.put({"type": "done", "gen": generation})


def _stop_worker():
    _stop_event.set()
    if _sim_thread and _sim_thread.is_alive():
        _sim_thread.join(timeout=3)


def _require_idle_sim():
    if _sim is None:
        return jsonify({"status": "error", "error": "no simulation, POST /start first"}), 409
    with _status_lock:
        if _sim_status["running"]:
            return jsonify({"status": "error", "error": "simulation is training"}), 409
    return None


# ──────────────────────────────────────────────────────────────────────────────
# Routes
# ──────────────────────────────────────────────────────────────────────────────

@app.route("/start", methods=["POST"])
def start():
    global _sim, _rng, _sim_thread, _stop_event, _gen_queue, _active_worker

    cfg = _build_cfg(request.get_json(silent=True) or {})

    # Stop any running sim
    _stop_worker()

    rng = np.random.default_rng(cfg["seed"])
    sim = Simulation.random(
        rng,
        num_animals          = cfg["num_animals"],
        num_foods            = cfg["num_foods"],
        generation_length    = cfg["generation_length"],
        mutation_chance      = cfg["mutation_chance"],
        mutation_coefficient = cfg["mutation_coefficient"],
    )

    with _sim_lock:
        _sim, _rng = sim, rng
    _stop_event = threading.Event()
    _gen_queue  = queue.Queue(maxsize=200)
    token = object()
    with _status_lock:
        # a worker that outlived _stop_worker's join can no longer touch status
        _active_worker = token
        _sim_status["generation"] = 0
        _sim_status["running"]    = cfg["autorun"]
        _sim_status["cfg"]        = cfg
        _sim_status["max_gen"]    = cfg["max_generations"]

    if cfg["autorun"]:
        _sim_thread = threading.Thread(
            target=_sim_worker,
            args=(sim, rng, cfg["max_generations"], _stop_event, _gen_queue, token),
            daemon=True,
        )
        _sim_thread.start()

    logger.info("simulation started: %s", cfg)
    return jsonify({"status": "started", "cfg": cfg})


@app.route("/stop", methods=["POST"])
def stop():
    _stop_worker()
    return jsonify({"status": "stopped"})


@app.route("/step", methods=["POST"])
def step_one():
    """Advance exactly one tick."""
    busy = _require_idle_sim()
    if busy:
        return busy
    with _sim_lock:
        stats = _sim.step(_rng)
        body = {"age": _sim.age, "generation": _sim.generation,
                "stats": stats.as_dict() if stats else None}
    return jsonify(body)


@app.route("/train", methods=["POST"])
def train():
    """Finish the current generation."""
    busy = _require_idle_sim()
    if busy:
        return busy
    with _sim_lock:
        stats = _sim.train(_rng)
        generation = _sim.generation
    with _status_lock:
        _sim_status["generation"] = generation
    return jsonify({"generation": generation, "stats": stats.as_dict()})


@app.route("/world", methods=["GET"])
def world():
    if _sim is None:
        return jsonify({"status": "error", "error": "no simulation, POST /start first"}), 409
    with _sim_lock:
        snapshot = _sim.world()
        age, generation = _sim.age, _sim.generation
    return jsonify({"age": age, "generation": generation, **snapshot.as_dict()})


@app.route("/status", methods=["GET"])
def status():
    with _status_lock:
        return jsonify(dict(_sim_status))


@app.route("/stream", methods=["GET"])
def stream():
    """SSE endpoint – browser subscribes and receives each generation as an event."""
    out_q = _gen_queue

    def event_gen():
        # Send a hello so the browser knows it's connected
        yield "data: {\"type\": \"connected\"}\n\n"

        while True:
            try:
                payload = out_q.get(timeout=1)
                yield f"data: {json.dumps(payload)}\n\n"
                if payload.get("type") == "done":
                    break
            except queue.Empty:
                # Keep-alive ping
                yield "data: {\"type\": \"ping\"}\n\n"

    return Response(
        event_gen(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",    # disable nginx buffering if behind proxy
        },
    )


# ──────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    print("=" * 50)
    print("  EvoForage Server  →  http://localhost:5000")
    print("  SSE stream        →  http://localhost:5000/stream")
    print("=" * 50)
    app.run(host="0.0.0.0", port=5000, threaded=True, debug=False)
