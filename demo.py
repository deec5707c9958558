"""
Quick demo – seeds a population, feeds it random senses for a few rounds,
breeds the agents that acted and prints how the action mix shifts.
"""
import os, sys
sys.path.insert(0, os.path.dirname(__file__))

from collections import Counter

import numpy as np

from population import seed_population, spawn_offspring, decide
from genome import SenseType

ROUNDS      = 20
POPULATION  = 200
GENOME_SIZE = 16

rng    = np.random.default_rng(42)
agents = seed_population(POPULATION, GENOME_SIZE, rng)


def random_senses(agent):
    values = rng.random(len(SenseType))
    return {kind: float(values[kind.value]) for kind in SenseType}


for round_idx in range(ROUNDS):
    decisions = decide(agents, random_senses)
    tally = Counter(d.label if d is not None else "idle" for d in decisions)
    print(f"round {round_idx:3d}  " +
          "  ".join(f"{k}={v}" for k, v in sorted(tally.items())))

    parents = [a for a, d in zip(agents, decisions) if d is not None]
    if not parents:
        print("  !! no agent acted – stopping.")
        break
    children = []
    while len(children) < POPULATION:
        parent = parents[int(rng.integers(0, len(parents)))]
        child = spawn_offspring(parent, rng)
        if child is not None:
            children.append(child)
    agents = children

print("\nSample brain:\n" + agents[0].graph_debug_dump())
