"""
Tests for gene decoding, the genome text codec and mutation.
"""

import numpy as np
import pytest

from genome import (Gene, FormatError, SenseType, ActionType,
                    Sense, Action, Internal, Connection, decode_gene,
                    random_genome, genome_to_string, genome_from_string,
                    mutate_genome)
from config import NUM_SENSES, NUM_ACTIONS


def test_decode_is_total():
    for value in range(256):
        assert isinstance(decode_gene(value), (Sense, Action, Internal, Connection))


def test_connection_takes_priority():
    assert decode_gene(0b11000101) == Connection(5, True)
    assert decode_gene(0b10111111) == Connection(63, False)


def test_internal_bias():
    assert decode_gene(0b01000000) == Internal(0.0)
    assert decode_gene(0b01010000) == Internal(0.5)
    assert decode_gene(0b01100000) == Internal(1.0)
    assert decode_gene(0b01000001).bias == pytest.approx(1 / 32)


def test_kind_index_wraps_modulo_variant_count():
    assert decode_gene(0b00100000) == Action(ActionType.MOVE)
    assert decode_gene(0b00100101) == Action(ActionType.MOVE)
    assert decode_gene(0b00111111) == Action(ActionType.TURN_LEFT)
    assert decode_gene(0b00000001) == Sense(SenseType.AGENT)
    assert decode_gene(0b00000110) == Sense(SenseType.BLOCKED)
    assert decode_gene(0b00011111) == Sense(SenseType.AGENT)


def test_enumeration_order_is_fixed():
    assert [k.label for k in SenseType] == [
        "Blocked", "Agent", "AgentDensity", "Food", "FoodDensity", "Direction"]
    assert [k.label for k in ActionType] == [
        "Move", "TurnLeft", "TurnRight", "Kill", "ProduceFood"]
    assert SenseType.from_label("food_density") is SenseType.FOOD_DENSITY
    with pytest.raises(KeyError):
        ActionType.from_label("Eat")
    assert len(SenseType) == NUM_SENSES
    assert len(ActionType) == NUM_ACTIONS


def test_gene_text_round_trip():
    for value in range(256):
        gene = Gene(value)
        assert len(str(gene)) == 8
        assert Gene.from_string(str(gene)) == gene
    assert str(Gene(0b10110010)) == "10110010"


@pytest.mark.parametrize("text", ["", "1010", "101100101", "10102010", "abcdefgh", " 1011001"])
def test_gene_from_string_rejects_bad_input(text):
    with pytest.raises(FormatError):
        Gene.from_string(text)


def test_gene_value_range():
    with pytest.raises(ValueError):
        Gene(256)
    with pytest.raises(ValueError):
        Gene(-1)


def test_mutate_flips_exactly_one_bit():
    rng = np.random.default_rng(0)
    gene = Gene(0b10101010)
    for _ in range(100):
        mutated = gene.mutate(rng)
        assert bin(mutated.value ^ gene.value).count("1") == 1
    assert gene.value == 0b10101010


def test_genome_text_format():
    genome = [Gene(0b10110010), Gene(0b01000001), Gene(0b11100101)]
    text = genome_to_string(genome)
    assert text == "10110010 01000001 11100101"
    assert genome_from_string(text) == genome
    assert genome_to_string(genome, ",") == "10110010,01000001,11100101"
    assert genome_from_string("10110010,01000001", ",") == genome[:2]


def test_empty_genome_text():
    assert genome_to_string([]) == ""
    assert genome_from_string("") == []
    assert genome_from_string("   ") == []


def test_genome_from_string_rejects_bad_token():
    with pytest.raises(FormatError):
        genome_from_string("10110010 0100001 11100101")


def test_random_genome_is_seedable():
    a = random_genome(32, np.random.default_rng(7))
    b = random_genome(32, np.random.default_rng(7))
    assert len(a) == 32
    assert a == b


def test_mutate_genome_without_mutation_is_identity():
    genome = random_genome(20, np.random.default_rng(1))
    assert mutate_genome(genome, np.random.default_rng(2), frequency=0.0) == genome_to_string(genome)


def test_structural_mutation_changes_length_by_one():
    rng = np.random.default_rng(3)
    genome = random_genome(10, rng)
    lengths = {len(genome_from_string(mutate_genome(genome, rng, frequency=1.0)))
               for _ in range(50)}
    assert lengths == {9, 11}
    assert len(genome) == 10


def test_structural_removal_on_empty_genome_is_safe():
    rng = np.random.default_rng(4)
    for _ in range(20):
        assert len(genome_from_string(mutate_genome([], rng, frequency=1.0))) in (0, 1)


def test_point_mutation_touches_bounded_gene_count():
    rng = np.random.default_rng(5)
    genome = random_genome(10, rng)
    for _ in range(50):
        child = genome_from_string(mutate_genome(genome, rng, frequency=0.5))
        if len(child) == len(genome):
            changed = sum(1 for a, b in zip(genome, child) if a != b)
            assert changed <= 5
