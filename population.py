"""
Population helpers for EvoBrain.

The world layer owns placement, movement and selection. What it needs from
here is:
  1. Seed a population of viable agents from one reproducible generator
  2. Turn a parent into an accepted offspring
  3. Run one decision round over many agents

A genome that wires connections but encodes no nodes is non-viable
(InvalidGenome); both seeding and reproduction discard it and try again.
"""

import logging
from typing import Callable, Optional

import numpy as np

from agent import Agent
from brain import InvalidGenome
from config import (POPULATION, GENOME_SIZE, MAX_SEED_ATTEMPTS,
                    MAX_OFFSPRING_ATTEMPTS, MUTATION_FREQUENCY)

logger = logging.getLogger(__name__)


def seed_population(count: int = POPULATION, gene_count: int = GENOME_SIZE,
                    seed=None, max_attempts: int = MAX_SEED_ATTEMPTS) -> list:
    """
    Create `count` viable agents with random genomes.

    Non-viable genomes are discarded and redrawn; more than `max_attempts`
    discards raises RuntimeError.
    """
    rng = seed if isinstance(seed, np.random.Generator) \
        else np.random.default_rng(seed)
    agents = []
    discarded = 0
    while len(agents) < count:
        try:
            agents.append(Agent.from_random(gene_count, rng))
        except InvalidGenome:
            discarded += 1
            if discarded > max_attempts:
                raise RuntimeError(
                    f"gave up seeding after {discarded} non-viable genomes "
                    f"({len(agents)}/{count} agents created)")

    if discarded:
        logger.info("seeded %d agents (%d non-viable genomes discarded)",
                    count, discarded)
    return agents


def spawn_offspring(parent: Agent, rng=None,
                    max_attempts: int = MAX_OFFSPRING_ATTEMPTS,
                    frequency: float = MUTATION_FREQUENCY) -> Optional[Agent]:
    """
    Reproduce `parent` into a new Agent, retrying while the mutated genome
    is non-viable. Returns None when every attempt fails.
    """
    if rng is None:
        rng = np.random.default_rng()
    for attempt in range(max_attempts):
        text = parent.reproduce(rng, frequency)
        try:
            return Agent.from_text(text)
        except InvalidGenome:
            logger.debug("offspring attempt %d non-viable: %s", attempt + 1, text)
    logger.warning("no viable offspring after %d attempts", max_attempts)
    return None


def decide(agents: list, sense_for: Callable) -> list:
    """
    One decision round: `sense_for(agent)` supplies the sense lookup for
    each agent. Returns the chosen ActionType (or None) per agent, in order.
    """
    decisions = [agent.evaluate(sense_for(agent)) for agent in agents]
    idle = sum(1 for d in decisions if d is None)
    logger.debug("decision round: %d agents, %d idle", len(agents), idle)
    return decisions
