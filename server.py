"""
EvoBrain Server  –  Flask JSON API for inspection tooling
=========================================================

Endpoints:
  GET  /random       Random genome        (?genes=16&seed=42)
  POST /brain        Pruned brain of a genome: nodes, edges, Graphviz dump
  POST /evaluate     Dominant action for {"genome", "senses": {"Food": 0.7}}
  POST /reproduce    Viable mutated offspring of {"genome", "seed"}
  POST /seed         Genomes of a seeded population {"agents", "genes", "seed"}

Run:
  python server.py
  # → http://localhost:5000
"""

import logging

import numpy as np
from flask import Flask, Response, request, jsonify

from agent import Agent
from brain import InvalidGenome, dominant_action
from genome import (FormatError, SenseType, Sense, Action, Internal,
                    random_genome, genome_to_string, genome_from_string)
from population import seed_population, spawn_offspring
from config import (GENOME_SIZE, POPULATION, MAX_API_GENES, MAX_API_AGENTS,
                    MAX_API_BRAIN_GENES,
                    SERVER_HOST, SERVER_PORT, LOG_LEVEL, LOG_FORMAT)

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────────────
app = Flask(__name__)


class BadRequest(ValueError):
    """Malformed request body or query parameter."""


# ──────────────────────────────────────────────────────────────────────────────
# CORS helper – allow any inspection front-end to call us
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


# ──────────────────────────────────────────────────────────────────────────────
# Errors
# ──────────────────────────────────────────────────────────────────────────────

@app.errorhandler(FormatError)
@app.errorhandler(BadRequest)
def bad_request(exc):
    return jsonify({"error": str(exc)}), 400

@app.errorhandler(InvalidGenome)
def invalid_genome(exc):
    return jsonify({"error": str(exc)}), 422


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────

def _body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("expected a JSON object body")
    return data


def _agent_from(data: dict) -> Agent:
    text = data.get("genome")
    if not isinstance(text, str):
        raise BadRequest("'genome' must be a genome string")
    genome = genome_from_string(text)
    if len(genome) > MAX_API_BRAIN_GENES:
        raise BadRequest(f"genome too long: {len(genome)} genes "
                         f"(limit {MAX_API_BRAIN_GENES})")
    return Agent.from_genome(genome)


def _int_arg(value, default: int, name: str, upper: int = None) -> int:
    if value is None:
        return default
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"'{name}' must be an integer")
    if n < 0 or (upper is not None and n > upper):
        raise BadRequest(f"'{name}' out of range: {n}")
    return n


def _seed_arg(value):
    return None if value is None else _int_arg(value, 0, "seed")


def _senses(raw) -> dict:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise BadRequest("'senses' must be an object of NAME: VALUE")
    senses = {}
    for name, value in raw.items():
        try:
            senses[SenseType.from_label(name)] = float(value)
        except (KeyError, TypeError, ValueError) as exc:
            raise BadRequest(f"bad sense {name!r}: {exc}")
    return senses


def _node_json(node) -> dict:
    if isinstance(node, Sense):
        return {"type": "sense", "kind": node.kind.label}
    if isinstance(node, Action):
        return {"type": "action", "kind": node.kind.label}
    if isinstance(node, Internal):
        return {"type": "internal", "bias": node.bias}
    raise TypeError(f"not a brain node: {node!r}")


# ──────────────────────────────────────────────────────────────────────────────
# Routes
# ──────────────────────────────────────────────────────────────────────────────

@app.route("/random", methods=["GET"])
def new_genome():
    genes = _int_arg(request.args.get("genes"), GENOME_SIZE, "genes", MAX_API_GENES)
    rng   = np.random.default_rng(_seed_arg(request.args.get("seed")))
    return jsonify({"genome": genome_to_string(random_genome(genes, rng))})


@app.route("/brain", methods=["POST"])
def inspect_brain():
    agent = _agent_from(_body())
    return jsonify({
        "genome": agent.genome_text(),
        "nodes":  [_node_json(n) for n in agent.brain.nodes],
        "edges":  [
            {"source": e.source, "target": e.target, "inverted": e.inverted}
            for e in agent.brain.edges
        ],
        "dot":    agent.graph_debug_dump(),
    })


@app.route("/evaluate", methods=["POST"])
def evaluate():
    data    = _body()
    agent   = _agent_from(data)
    senses  = _senses(data.get("senses"))
    weights = agent.brain.action_weights(senses)
    action  = dominant_action(weights)
    return jsonify({
        "action":  action.label if action is not None else None,
        "weights": [
            {"action": kind.label, "weight": round(float(w), 6)}
            for kind, w in weights
        ],
    })


@app.route("/reproduce", methods=["POST"])
def reproduce():
    data   = _body()
    parent = _agent_from(data)
    child  = spawn_offspring(parent, np.random.default_rng(_seed_arg(data.get("seed"))))
    if child is None:
        raise InvalidGenome("no viable offspring")
    return jsonify({"parent": parent.genome_text(), "genome": child.genome_text()})


@app.route("/seed", methods=["POST"])
def seed_agents():
    data   = _body()
    count  = _int_arg(data.get("agents"), POPULATION, "agents", MAX_API_AGENTS)
    genes  = _int_arg(data.get("genes"), GENOME_SIZE, "genes", MAX_API_GENES)
    agents = seed_population(count, genes, _seed_arg(data.get("seed")))
    return jsonify({"genomes": [a.genome_text() for a in agents]})


# ──────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL.upper(), format=LOG_FORMAT)
    logger.info("EvoBrain server → http://%s:%d", SERVER_HOST, SERVER_PORT)
    app.run(host=SERVER_HOST, port=SERVER_PORT, threaded=True, debug=False)
