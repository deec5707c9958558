"""
Agent class for EvoBrain.

Each agent has:
  - A genome (list of 8-bit Genes)
  - A Brain compiled from the genome

The brain is a pure function of the genome and is only ever built when an
agent is constructed. Reproduction never touches the parent: it returns the
text of a mutated copy, which the caller turns into a new Agent.
"""

from typing import Optional

import numpy as np

from brain import Brain, SenseLookup
from genome import (ActionType, random_genome, genome_to_string,
                    genome_from_string, mutate_genome)
from config import GENOME_SIZE, MUTATION_FREQUENCY


class Agent:
    """
    A single decision-making agent.
    """
    __slots__ = ("genome", "brain")

    def __init__(self, genome: list):
        self.genome = list(genome)
        self.brain  = Brain(self.genome)     # raises InvalidGenome

    # ──────────────────────────────────────────────────────────────────────────
    # Constructors
    # ──────────────────────────────────────────────────────────────────────────

    @classmethod
    def from_genome(cls, genome: list) -> "Agent":
        return cls(genome)

    @classmethod
    def from_random(cls, gene_count: int = GENOME_SIZE, seed=None) -> "Agent":
        """
        Build an agent from `gene_count` random genes.
        `seed` is an int, None, or an existing numpy Generator to draw from.
        """
        rng = seed if isinstance(seed, np.random.Generator) \
            else np.random.default_rng(seed)
        return cls(random_genome(gene_count, rng))

    @classmethod
    def from_text(cls, text: str) -> "Agent":
        return cls(genome_from_string(text))

    # ──────────────────────────────────────────────────────────────────────────

    def evaluate(self, sense: SenseLookup) -> Optional[ActionType]:
        """Sense → think: the dominant action for this tick, if any."""
        return self.brain.evaluate(sense)

    def reproduce(self, rng=None,
                  frequency: float = MUTATION_FREQUENCY) -> str:
        """Text of a mutated copy of this agent's genome."""
        return mutate_genome(self.genome, rng, frequency)

    def genome_text(self) -> str:
        return genome_to_string(self.genome)

    def graph_debug_dump(self) -> str:
        return self.brain.to_dot()

    def __repr__(self):
        return (f"Agent(genes={len(self.genome)}, "
                f"nodes={self.brain.node_count}, edges={self.brain.edge_count})")
