"""
Brain graph for EvoBrain.

A brain is compiled from a genome:
  1. Every Sense / Action / Internal gene becomes a node, in genome order.
  2. Consecutive pairs of Connection genes become directed edges
     (source index % node_count → target index % node_count), carrying the
     first gene's inversion flag. An unpaired trailing connection is dropped.
  3. Sense nodes lose their incoming edges, Action nodes their outgoing ones.
  4. Dead nodes are pruned until a pass removes nothing.

At decision time every Action node is resolved by walking incoming edges
back towards the Sense nodes; the heaviest Action wins. Cycles among
Internal nodes survive pruning and are cut off during the walk.
"""

import logging
from collections import namedtuple, deque
from typing import Callable, Mapping, Optional, Union

from genome import (Sense, Action, Internal, Connection, SenseType,
                    ActionType, genome_from_string)
from config import ACTION_BIAS

logger = logging.getLogger(__name__)

SenseLookup = Union[Callable[[SenseType], float], Mapping[SenseType, float]]


class InvalidGenome(ValueError):
    """Raised when a genome wires connections but encodes no nodes."""


class Edge(namedtuple("Edge", "source target inverted")):
    __slots__ = ()


def _as_lookup(sense: SenseLookup) -> Callable[[SenseType], float]:
    if callable(sense):
        return sense
    return lambda kind: sense.get(kind, 0.0)


class Brain:
    """
    Directed graph of Sense / Internal / Action nodes built from a genome.
    Nodes live in a dense list addressed by index; edges are an ordered list
    of Edge(source, target, inverted). Parallel edges and self-loops allowed.
    """

    def __init__(self, genome: list):
        self.nodes = []
        self.edges = []
        self._inbound, self._inbound_for, self._inbound_len = {}, None, 0
        self._wire(genome)
        removed_edges = self.prune_edges()
        removed_nodes = self.prune_nodes()
        logger.debug("brain built from %d genes: %d nodes, %d edges "
                     "(pruned %d edges, %d nodes)", len(genome),
                     len(self.nodes), len(self.edges),
                     removed_edges, removed_nodes)

    @classmethod
    def from_string(cls, text: str) -> "Brain":
        return cls(genome_from_string(text))

    # ──────────────────────────────────────────────────────────────────────────
    # Construction
    # ──────────────────────────────────────────────────────────────────────────

    def _wire(self, genome: list):
        connections = []
        for gene in genome:
            parsed = gene.decode()
            if isinstance(parsed, Connection):
                connections.append(parsed)
            else:
                self.nodes.append(parsed)

        n = len(self.nodes)
        for a, b in zip(connections[0::2], connections[1::2]):
            if n == 0:
                raise InvalidGenome("genome wires connections but has no nodes")
            self.edges.append(Edge(a.index % n, b.index % n, a.inverted))

    def prune_edges(self) -> int:
        """Drop edges into Sense nodes and out of Action nodes."""
        before = len(self.edges)
        self.edges = [
            e for e in self.edges
            if not isinstance(self.nodes[e.target], Sense)
            and not isinstance(self.nodes[e.source], Action)
        ]
        return before - len(self.edges)

    def prune_nodes(self) -> int:
        """
        Remove dead nodes until the node count stabilises.

        A node is dead when it is a Sense / Internal node whose only outgoing
        edge is a self-loop (or that has none), an Action node with no
        incoming edges, or any node that cannot reach an Action node.
        Returns the total number of nodes removed.
        """
        total = 0
        while True:
            live = self._ancestors_of_actions()
            dead = set()
            for i, node in enumerate(self.nodes):
                if isinstance(node, Action):
                    if not self.incoming(i):
                        dead.add(i)
                    continue
                out = self.outgoing(i)
                if (not out or (len(out) == 1 and out[0].target == i)
                        or i not in live):
                    dead.add(i)
            if not dead:
                return total
            self._remove_nodes(dead)
            total += len(dead)

    def _ancestors_of_actions(self) -> set:
        """Every node that reaches some Action node along directed edges."""
        seen = set()
        queue = deque(i for i, node in enumerate(self.nodes)
                      if isinstance(node, Action))
        while queue:
            i = queue.popleft()
            if i in seen:
                continue
            seen.add(i)
            queue.extend(e.source for e in self.incoming(i))
        return seen

    def _remove_nodes(self, dead: set):
        remap = {}
        kept = []
        for i, node in enumerate(self.nodes):
            if i not in dead:
                remap[i] = len(kept)
                kept.append(node)
        self.nodes = kept
        self.edges = [
            Edge(remap[e.source], remap[e.target], e.inverted)
            for e in self.edges
            if e.source in remap and e.target in remap
        ]

    # ──────────────────────────────────────────────────────────────────────────
    # Graph queries
    # ──────────────────────────────────────────────────────────────────────────

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def incoming(self, index: int) -> list:
        if self._inbound_for is not self.edges or self._inbound_len != len(self.edges):
            inbound = {}
            for e in self.edges:
                inbound.setdefault(e.target, []).append(e)
            self._inbound = inbound
            self._inbound_for, self._inbound_len = self.edges, len(self.edges)
        return list(self._inbound.get(index, ()))

    def outgoing(self, index: int) -> list:
        return [e for e in self.edges if e.source == index]

    def find_edge(self, source: int, target: int) -> Optional[Edge]:
        for e in self.incoming(target):
            if e.source == source:
                return e
        return None

    # ──────────────────────────────────────────────────────────────────────────
    # Evaluation
    # ──────────────────────────────────────────────────────────────────────────

    def resolve(self, index: int, sense: SenseLookup,
                history: tuple = (), memo: dict = None) -> Optional[float]:
        """
        Activation of node `index`, or None when it has no defined weight.

        `history` is the walk from the Action node being evaluated down to
        this node's parent. A node already on the walk does not recurse:
        an Internal node answers with its bias, anything else with None.

        The answer depends only on the node, the set of nodes on the walk
        and the inversion flag of the edge to the parent, so results are
        cached in `memo` under that key for the duration of one evaluation.
        """
        lookup = _as_lookup(sense)
        if memo is None:
            memo = {}
        node = self.nodes[index]
        revisit = index in history

        if revisit and isinstance(node, Internal) and not self.incoming(index):
            return node.bias

        if isinstance(node, Sense):
            return float(lookup(node.kind))

        bias = node.bias if isinstance(node, Internal) else ACTION_BIAS
        if revisit:
            return node.bias if isinstance(node, Internal) else None

        # inversion of the edge carrying this node's output to its parent
        parent = self.find_edge(index, history[-1]) if history else None
        inverted = parent is not None and parent.inverted

        key = (index, frozenset(history), inverted)
        if key in memo:
            return memo[key]
        path = tuple(history) + (index,)

        count, total = 0, 0.0
        for edge in self.incoming(index):
            weight = self.resolve(edge.source, lookup, path, memo)
            if weight is None:
                continue
            count += 1
            total += -weight if inverted else weight

        if count == 0:
            result = bias if isinstance(node, Internal) else None
        else:
            result = total / count * bias
        memo[key] = result
        return result

    def action_weights(self, sense: SenseLookup) -> list:
        """(ActionType, weight) for every sink Action node with a defined weight."""
        lookup = _as_lookup(sense)
        memo = {}
        weights = []
        for i, node in enumerate(self.nodes):
            if isinstance(node, Action) and not self.outgoing(i):
                weight = self.resolve(i, lookup, (), memo)
                if weight is not None:
                    weights.append((node.kind, weight))
        return weights

    def evaluate(self, sense: SenseLookup) -> Optional[ActionType]:
        """Dominant action for this sense snapshot, or None."""
        return dominant_action(self.action_weights(sense))

    # ──────────────────────────────────────────────────────────────────────────

    def to_dot(self) -> str:
        """Graphviz listing of nodes and edges (inspection only)."""
        lines = ["digraph {"]
        for i, node in enumerate(self.nodes):
            lines.append(f'    {i} [ label = "{node}" ]')
        for e in self.edges:
            lines.append(f'    {e.source} -> {e.target} '
                         f'[ label = "{str(e.inverted).lower()}" ]')
        lines.append("}")
        return "\n".join(lines)

    def summary(self) -> str:
        lines = [f"Brain ({len(self.nodes)} nodes, {len(self.edges)} edges)"]
        for i, node in enumerate(self.nodes):
            lines.append(f"  N{i:02d}  {node}")
        for e in self.edges:
            arrow = "-x>" if e.inverted else "-->"
            lines.append(f"  N{e.source:02d} {arrow} N{e.target:02d}")
        return "\n".join(lines)

    def __repr__(self):
        return f"Brain(nodes={len(self.nodes)}, edges={len(self.edges)})"


def build_brain(genome: list) -> Brain:
    """Compile a genome into its pruned brain graph; raises InvalidGenome."""
    return Brain(genome)


def dominant_action(weights: list) -> Optional[ActionType]:
    """
    Heaviest action of an action_weights() list, or None when it is empty.
    Equal weights keep the first Action node in index order.
    """
    best = None
    for kind, weight in weights:
        if best is None or weight > best[1]:
            best = (kind, weight)
    return best[0] if best is not None else None
