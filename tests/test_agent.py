"""
Tests for the Agent facade and the population helpers.
"""

import numpy as np
import pytest

from agent import Agent
from brain import InvalidGenome
from genome import ActionType, SenseType, Gene, genome_from_string
from population import seed_population, spawn_offspring, decide

SENSE_TO_MOVE = "00000001 00100000 10000000 10000001"


def test_from_text_and_back():
    agent = Agent.from_text(SENSE_TO_MOVE)
    assert agent.genome_text() == SENSE_TO_MOVE
    assert agent.evaluate({SenseType.AGENT: 0.7}) is ActionType.MOVE
    assert agent.graph_debug_dump() == agent.brain.to_dot()


def test_from_genome_copies_gene_list():
    genes = [Gene(0b00000001), Gene(0b00100000), Gene(0b10000000), Gene(0b10000001)]
    agent = Agent.from_genome(genes)
    genes.append(Gene(0))
    assert len(agent.genome) == 4


def test_invalid_genome_propagates():
    with pytest.raises(InvalidGenome):
        Agent.from_text("10000000 10000001")


def test_from_random_is_seedable():
    a = Agent.from_random(16, seed=11)
    b = Agent.from_random(16, seed=11)
    assert len(a.genome) == 16
    assert a.genome_text() == b.genome_text()
    assert a.graph_debug_dump() == b.graph_debug_dump()

    rng = np.random.default_rng(11)
    assert Agent.from_random(16, rng).genome_text() == a.genome_text()


def test_reproduce_leaves_parent_untouched():
    agent = Agent.from_text(SENSE_TO_MOVE)
    rng = np.random.default_rng(0)
    for _ in range(20):
        child_text = agent.reproduce(rng)
        assert abs(len(genome_from_string(child_text)) - 4) <= 1
    assert agent.genome_text() == SENSE_TO_MOVE


def test_seed_population():
    agents = seed_population(25, 16, seed=3)
    assert len(agents) == 25
    assert all(isinstance(a, Agent) for a in agents)
    again = seed_population(25, 16, seed=3)
    assert [a.genome_text() for a in agents] == [a.genome_text() for a in again]


def test_seed_population_gives_up():
    # two-gene genomes are non-viable whenever both genes are connections
    with pytest.raises(RuntimeError):
        seed_population(200, 2, seed=1, max_attempts=0)


def test_spawn_offspring():
    parent = Agent.from_text(SENSE_TO_MOVE)
    child = spawn_offspring(parent, np.random.default_rng(9))
    assert isinstance(child, Agent)
    assert child is not parent
    assert spawn_offspring(parent, np.random.default_rng(9), max_attempts=0) is None


def test_decide():
    agents = [Agent.from_text(SENSE_TO_MOVE), Agent.from_text("")]
    decisions = decide(agents, lambda agent: {SenseType.AGENT: 0.5})
    assert decisions == [ActionType.MOVE, None]
