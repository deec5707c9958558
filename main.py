"""
EvoBrain – Command Line Entry Point
===================================

Usage examples:
  python main.py random --genes 16 --seed 42       # print a random genome
  python main.py inspect "00000001 00100000 10000000 10000001"
  python main.py decide "00000001 00100000 10000000 10000001" --sense Agent=0.7
  python main.py breed "00000001 00100000 10000000 10000001" --seed 7
  python main.py seed --agents 10 --genes 16 --seed 1
"""

import argparse
import logging
import sys

import numpy as np

from agent import Agent
from brain import InvalidGenome
from genome import FormatError, SenseType, random_genome, genome_to_string
from population import seed_population, spawn_offspring
from config import GENOME_SIZE, POPULATION, LOG_LEVEL, LOG_LEVELS, LOG_FORMAT


# ──────────────────────────────────────────────────────────────────────────────
# CLI
# ──────────────────────────────────────────────────────────────────────────────

def _sense_pair(text: str):
    """Parse "Food=0.7" into (SenseType.FOOD, 0.7)."""
    name, sep, value = text.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    try:
        return SenseType.from_label(name), float(value)
    except (KeyError, ValueError) as exc:
        raise argparse.ArgumentTypeError(str(exc))


def build_parser():
    p = argparse.ArgumentParser(description="EvoBrain – genome-compiled agent brains")
    p.add_argument("--log-level", default=LOG_LEVEL.upper(), type=str.upper,
                   choices=LOG_LEVELS, help="Logging level")
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("random", help="Print a random genome")
    r.add_argument("--genes", type=int, default=GENOME_SIZE)
    r.add_argument("--seed",  type=int, default=None)

    i = sub.add_parser("inspect", help="Print the pruned brain as Graphviz")
    i.add_argument("genome")
    i.add_argument("--summary", action="store_true",
                   help="Plain-text node/edge listing instead of Graphviz")

    d = sub.add_parser("decide", help="Evaluate a brain against sense values")
    d.add_argument("genome")
    d.add_argument("--sense", type=_sense_pair, action="append", default=[],
                   metavar="NAME=VALUE", help="Sense reading (repeatable)")

    b = sub.add_parser("breed", help="Print a viable mutated offspring genome")
    b.add_argument("genome")
    b.add_argument("--seed", type=int, default=None)

    s = sub.add_parser("seed", help="Print genomes of a freshly seeded population")
    s.add_argument("--agents", type=int, default=POPULATION)
    s.add_argument("--genes",  type=int, default=GENOME_SIZE)
    s.add_argument("--seed",   type=int, default=None)
    return p


# ──────────────────────────────────────────────────────────────────────────────
# Commands
# ──────────────────────────────────────────────────────────────────────────────

def run(args) -> str:
    if args.command == "random":
        rng = np.random.default_rng(args.seed)
        return genome_to_string(random_genome(args.genes, rng))

    if args.command == "inspect":
        agent = Agent.from_text(args.genome)
        return agent.brain.summary() if args.summary else agent.graph_debug_dump()

    if args.command == "decide":
        senses = dict(args.sense)
        action = Agent.from_text(args.genome).evaluate(senses)
        return action.label if action is not None else "none"

    if args.command == "breed":
        child = spawn_offspring(Agent.from_text(args.genome),
                                np.random.default_rng(args.seed))
        if child is None:
            raise InvalidGenome("no viable offspring")
        return child.genome_text()

    if args.command == "seed":
        agents = seed_population(args.agents, args.genes, args.seed)
        return "\n".join(a.genome_text() for a in agents)

    raise ValueError(f"unknown command: {args.command}")


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level not in LOG_LEVELS:
        parser.error(f"unknown log level: {args.log_level}")
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)
    try:
        print(run(args))
    except (FormatError, InvalidGenome) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
