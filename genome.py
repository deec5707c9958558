"""
Genome encoding / decoding for EvoBrain.

Each gene is one byte. Decoding checks the high bits in priority order:

 Bit 7 set            : connection  (bits 0-5 → node index, bit 6 → inverted)
 Bit 6 set            : internal    (bits 0-5 / 32 → bias)
 Bit 5 set            : action      (bits 0-4 mod NUM_ACTIONS → ActionType)
 otherwise            : sense       (bits 0-4 mod NUM_SENSES  → SenseType)

A genome is an ordered list of genes. Its text form is the 8-character
binary encoding of every gene joined by GENOME_DELIMITER, e.g.
"10110010 01000001 11100101".
"""

import logging
from collections import namedtuple
from enum import Enum

import numpy as np

from config import (GENOME_SIZE, GENOME_DELIMITER, MUTATION_FREQUENCY,
                    CONNECTION_BIT, INVERTED_BIT, INTERNAL_BIT, ACTION_BIT,
                    INDEX_MASK, KIND_MASK, BIAS_DIVISOR,
                    SENSE_LABELS, ACTION_LABELS)

logger = logging.getLogger(__name__)


class FormatError(ValueError):
    """Raised when a gene or genome string is not valid 8-bit binary."""


# ──────────────────────────────────────────────────────────────────────────────
# Sense / Action kinds
# ──────────────────────────────────────────────────────────────────────────────

class _Kind(Enum):

    @property
    def label(self) -> str:
        return self._labels()[self.value]

    @classmethod
    def _labels(cls) -> dict:
        raise NotImplementedError

    @classmethod
    def from_index(cls, raw_index: int):
        """Map a raw gene index onto the fixed enumeration order."""
        return cls(raw_index % len(cls))

    @classmethod
    def from_label(cls, text: str):
        """Look a kind up by label ("FoodDensity") or member name ("FOOD_DENSITY")."""
        wanted = text.strip().lower()
        for kind in cls:
            if wanted in (kind.label.lower(), kind.name.lower()):
                return kind
        raise KeyError(f"unknown {cls.__name__}: {text!r}")

    def __str__(self):
        return self.label


class SenseType(_Kind):
    BLOCKED       = 0
    AGENT         = 1
    AGENT_DENSITY = 2
    FOOD          = 3
    FOOD_DENSITY  = 4
    DIRECTION     = 5

    @classmethod
    def _labels(cls) -> dict:
        return SENSE_LABELS


class ActionType(_Kind):
    MOVE         = 0
    TURN_LEFT    = 1
    TURN_RIGHT   = 2
    KILL         = 3
    PRODUCE_FOOD = 4

    @classmethod
    def _labels(cls) -> dict:
        return ACTION_LABELS


# ──────────────────────────────────────────────────────────────────────────────
# Decoded gene variants (Sense / Action / Internal double as brain nodes)
# ──────────────────────────────────────────────────────────────────────────────

class Sense(namedtuple("Sense", "kind")):
    __slots__ = ()

    def __str__(self):
        return f"Sense({self.kind.label})"


class Action(namedtuple("Action", "kind")):
    __slots__ = ()

    def __str__(self):
        return f"Action({self.kind.label})"


class Internal(namedtuple("Internal", "bias")):
    __slots__ = ()

    def __str__(self):
        return f"Internal({self.bias:g})"


class Connection(namedtuple("Connection", "index inverted")):
    __slots__ = ()

    def __str__(self):
        return f"Connection({self.index}, {'inverted' if self.inverted else 'direct'})"


def _bit(value: int, index: int) -> bool:
    return bool(value & (1 << index))


def decode_gene(value: int):
    """Unpack one byte into its gene variant. Total over 0..255."""
    if _bit(value, CONNECTION_BIT):
        return Connection(value & INDEX_MASK, _bit(value, INVERTED_BIT))
    if _bit(value, INTERNAL_BIT):
        return Internal((value & INDEX_MASK) / BIAS_DIVISOR)
    if _bit(value, ACTION_BIT):
        return Action(ActionType.from_index(value & KIND_MASK))
    return Sense(SenseType.from_index(value & KIND_MASK))


# ──────────────────────────────────────────────────────────────────────────────
# Gene
# ──────────────────────────────────────────────────────────────────────────────

class Gene:
    """A single immutable 8-bit gene."""
    __slots__ = ("_value",)

    def __init__(self, value: int):
        value = int(value)
        if not 0 <= value <= 0xFF:
            raise ValueError(f"gene value out of range: {value}")
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    def decode(self):
        return decode_gene(self._value)

    def mutate(self, rng=None) -> "Gene":
        """Return a copy with exactly one uniformly chosen bit flipped."""
        if rng is None:
            rng = np.random.default_rng()
        return Gene(self._value ^ (1 << int(rng.integers(0, 8))))

    @classmethod
    def from_string(cls, text: str) -> "Gene":
        if len(text) != 8 or any(ch not in "01" for ch in text):
            raise FormatError(f"not an 8-bit binary gene: {text!r}")
        return cls(int(text, 2))

    def __str__(self):
        return format(self._value, "08b")

    def __repr__(self):
        return f"Gene({str(self)})"

    def __eq__(self, other):
        if not isinstance(other, Gene):
            return NotImplemented
        return self._value == other._value

    def __hash__(self):
        return hash(self._value)

    def __int__(self):
        return self._value


# ──────────────────────────────────────────────────────────────────────────────
# Genome-level operations
# ──────────────────────────────────────────────────────────────────────────────

def random_gene(rng=None) -> Gene:
    if rng is None:
        rng = np.random.default_rng()
    return Gene(int(rng.integers(0, 256)))


def random_genome(size: int = GENOME_SIZE, rng=None) -> list:
    """Generate a random genome as a list of Genes."""
    if rng is None:
        rng = np.random.default_rng()
    return [Gene(int(v)) for v in rng.integers(0, 256, size=size)]


def genome_to_string(genome: list, delimiter: str = GENOME_DELIMITER) -> str:
    return delimiter.join(str(gene) for gene in genome).rstrip(delimiter)


def genome_from_string(text: str, delimiter: str = GENOME_DELIMITER) -> list:
    """
    Parse the textual genome encoding. Blank text is the empty genome;
    any token that is not an 8-bit binary string raises FormatError.
    """
    text = text.strip()
    if not text:
        return []
    if delimiter.strip():
        tokens = [t.strip() for t in text.split(delimiter)]
    else:
        tokens = text.split()
    return [Gene.from_string(token) for token in tokens]


def mutate_genome(genome: list, rng=None,
                  frequency: float = MUTATION_FREQUENCY) -> str:
    """
    Copy `genome` with mutations applied and return the copy's text form.

    With probability `frequency` a single structural edit happens: a random
    gene is appended or a random gene removed (50/50). Otherwise
    round(len * frequency) genes, drawn with replacement, each get one bit
    flipped. The input list is never modified.
    """
    if rng is None:
        rng = np.random.default_rng()
    mutated = list(genome)

    if rng.random() < frequency:
        if rng.random() < 0.5:
            mutated.append(random_gene(rng))
        elif mutated:
            del mutated[int(rng.integers(0, len(mutated)))]
        else:
            logger.debug("structural removal skipped: empty genome")
    else:
        length = len(mutated)
        for _ in range(int(round(length * frequency))):
            i = int(rng.integers(0, length))
            mutated[i] = mutated[i].mutate(rng)

    return genome_to_string(mutated)
