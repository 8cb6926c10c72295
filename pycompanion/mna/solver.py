"""
Modified Nodal Analysis of a linear circuit.

Unknowns are the voltages of the non-ground nodes followed by one branch
current for every auxiliary element (battery or 0-ohm resistor) in a
spanning forest of those elements:

    x = [V_0 .. V_{n-1}, I_n .. I_{n+m-1}]

Auxiliary elements that close a consistent loop add no unknown; their
currents are recovered afterwards.

Stamp patterns are collected as (row, col, sign) lists first and handed to
a linear system backend, which scatters them into the matrix in a single
vectorised update.
"""

from __future__ import annotations

import logging
import math
from typing import NamedTuple, Iterable

import jax
import jax.numpy as jnp

from ..errors import SingularMatrix, NumericDivergence
from ..logging import logger
from .backend import LinearSolverBackend, Stamps, get_backend, solve_stamps
from .network import MNAElement, Category, NodeId


def _compute_conductance_idx(ia: int, ib: int) -> tuple[list[int], list[int], list[float]]:
    """
    Rows, columns and signs for a conductance stamp between ia and ib.

    G[ia, ia] += g
    G[ib, ib] += g
    G[ia, ib] -= g
    G[ib, ia] -= g

    Ground is -1 and contributes no entries.
    """
    rows, cols, signs = [], [], []
    if ia >= 0:
        rows.append(ia)
        cols.append(ia)
        signs.append(1.0)
    if ib >= 0:
        rows.append(ib)
        cols.append(ib)
        signs.append(1.0)
    if ia >= 0 and ib >= 0:
        rows += [ia, ib]
        cols += [ib, ia]
        signs += [-1.0, -1.0]
    return rows, cols, signs


def _compute_auxiliary_idx(ia: int, ib: int, k: int) -> tuple[list[int], list[int], list[float]]:
    """
    Rows, columns and signs for an auxiliary-current element from ia to ib.

    KCL: the branch current leaves ia and enters ib
        G[ia, k] += 1
        G[ib, k] -= 1
    Constraint row: V(ib) - V(ia) = value
        G[k, ib] += 1
        G[k, ia] -= 1
    """
    rows, cols, signs = [], [], []
    if ia >= 0:
        rows += [ia, k]
        cols += [k, ia]
        signs += [1.0, -1.0]
    if ib >= 0:
        rows += [ib, k]
        cols += [k, ib]
        signs += [-1.0, 1.0]
    return rows, cols, signs


class MNASolution(NamedTuple):
    """
    Solved node voltages plus the branch currents of auxiliary elements.

    Resistor currents are not stored; they are computed on demand with Ohm's
    law.
    """
    node_voltages: dict
    elements: tuple[MNAElement, ...]
    auxiliary_currents: dict  # element position -> current

    def node_voltage(self, node: NodeId) -> float:
        return self.node_voltages[node]

    def voltage(self, node0: NodeId, node1: NodeId) -> float:
        """V(node0) - V(node1)."""
        return self.node_voltages[node0] - self.node_voltages[node1]

    def element_voltage(self, element: MNAElement) -> float:
        """Voltage drop across an element in the direction of positive current."""
        return self.voltage(element.node0, element.node1)

    def _index_of(self, element: MNAElement) -> int:
        for k, candidate in enumerate(self.elements):
            if candidate is element:
                return k
        for k, candidate in enumerate(self.elements):
            if candidate == element:
                return k
        raise KeyError(f"{element} is not part of this solution")

    def current(self, element: MNAElement) -> float:
        """
        Current through an element, positive from node0 to node1.

        Resistors with R > 0 use Ohm's law; batteries and 0-ohm resistors
        read their auxiliary unknown; current sources return their value.
        """
        if element.category is Category.CONDUCTANCE:
            return self.element_voltage(element) / element.resistance
        if element.category is Category.INJECTION:
            return element.value
        return self.auxiliary_currents[self._index_of(element)]

    def approx_equals(self, other: MNASolution, atol: float = 1e-6) -> bool:
        """True if both solutions have the same nodes and matching values."""
        if set(self.node_voltages) != set(other.node_voltages):
            return False
        for node, v in self.node_voltages.items():
            if abs(v - other.node_voltages[node]) >= atol:
                return False
        if len(self.auxiliary_currents) != len(other.auxiliary_currents):
            return False
        for k, i in self.auxiliary_currents.items():
            element = self.elements[k]
            try:
                if abs(i - other.current(element)) >= atol:
                    return False
            except KeyError:
                return False
        return True


class MNACircuit(NamedTuple):
    """
    Immutable linear circuit: elements plus the ground (0V reference) node.

    Build and solve:
        circuit = MNACircuit((battery("0", "1", 9.0), resistor("1", "0", 3.0)), ground="0")
        solution = circuit.solve()
        solution.node_voltage("1")  # 9.0
    """
    elements: tuple[MNAElement, ...]
    ground: NodeId
    node_set: tuple = ()

    @classmethod
    def create(
        cls,
        elements: Iterable[MNAElement],
        ground: NodeId,
        nodes: Iterable[NodeId] | None = None,
    ) -> MNACircuit:
        """
        Create a circuit, validating node references.

        Args:
            elements: Resistors, batteries and current sources
            ground: Reference node
            nodes: Optional explicit node set. Every element terminal must be
                in it. Derived from the elements when omitted.
        """
        elements = tuple(elements)
        if nodes is None:
            return cls(elements, ground)
        node_set = tuple(dict.fromkeys(nodes))
        known = set(node_set) | {ground}
        for element in elements:
            for node in (element.node0, element.node1):
                if node not in known:
                    raise ValueError(f"{element} references node {node!r} outside the node set")
        return cls(elements, ground, node_set)

    @property
    def nodes(self) -> tuple:
        """All nodes, ground first, then in order of first appearance."""
        ordered = {self.ground: None}
        for node in self.node_set:
            ordered[node] = None
        for element in self.elements:
            ordered[element.node0] = None
            ordered[element.node1] = None
        return tuple(ordered)

    def __str__(self) -> str:
        return "\n".join(str(e) for e in self.elements)

    def _check_connectivity(self) -> None:
        """Every node needs a DC path to ground; current sources don't count."""
        adjacency: dict = {node: [] for node in self.nodes}
        for element in self.elements:
            if element.category is Category.INJECTION:
                continue
            adjacency[element.node0].append(element.node1)
            adjacency[element.node1].append(element.node0)

        visited = {self.ground}
        to_visit = [self.ground]
        while to_visit:
            node = to_visit.pop()
            for neighbour in adjacency[node]:
                if neighbour not in visited:
                    visited.add(neighbour)
                    to_visit.append(neighbour)

        floating = tuple(node for node in self.nodes if node not in visited)
        if floating:
            raise SingularMatrix(f"nodes with no path to ground: {list(floating)}", nodes=floating)

    def _spanning_auxiliary(
        self, auxiliary: list[tuple[int, MNAElement]]
    ) -> tuple[list[tuple[int, MNAElement]], list[tuple[int, MNAElement]]]:
        """
        Split batteries and 0-ohm elements into a spanning forest and the rest.

        Each of these elements pins V(node1) - V(node0). A weighted union-find
        tracks every node's voltage relative to its root, so an element whose
        ends are already joined closes a loop: the loop is accepted when its
        voltages sum to zero (the element's constraint is redundant) and
        rejected otherwise.
        """
        parent: dict = {}
        offset: dict = {}  # V(node) - V(parent[node])

        def find(node):
            if node not in parent:
                parent[node] = node
                offset[node] = 0.0
                return node
            path = []
            while parent[node] != node:
                path.append(node)
                node = parent[node]
            # compress, accumulating offsets from the root downward
            for member in reversed(path):
                up = parent[member]
                if up != node:
                    offset[member] += offset[up]
                parent[member] = node
            return node

        tree, redundant = [], []
        for k, element in auxiliary:
            root0, root1 = find(element.node0), find(element.node1)
            if root0 == root1:
                loop_voltage = offset[element.node1] - offset[element.node0]
                if not math.isclose(loop_voltage, element.value, rel_tol=1e-9, abs_tol=1e-12):
                    raise SingularMatrix(
                        f"inconsistent loop of voltage sources / zero-resistance elements closed by "
                        f"{element}: {element.value} V against {loop_voltage} V",
                        nodes=(element.node0, element.node1),
                    )
                redundant.append((k, element))
                continue
            parent[root0] = root1
            offset[root0] = offset[element.node1] - element.value - offset[element.node0]
            tree.append((k, element))
        return tree, redundant

    @staticmethod
    def _loop_currents(
        tree: list[tuple[int, MNAElement]],
        redundant: list[tuple[int, MNAElement]],
        tree_currents: list[float],
    ) -> tuple[list[float], list[float]]:
        """
        Spread current over consistent auxiliary loops.

        Every redundant element closes one loop through the forest. Any
        circulating current around such a loop satisfies the circuit, so the
        split with the smallest sum of squared currents is chosen.
        """
        adjacency: dict = {}
        for t, (_, element) in enumerate(tree):
            adjacency.setdefault(element.node0, []).append((t, element.node1, 1.0))
            adjacency.setdefault(element.node1, []).append((t, element.node0, -1.0))

        # loop[t][j]: current through tree element t per unit circulating in loop j
        loop = [[0.0] * len(redundant) for _ in tree]
        for j, (_, element) in enumerate(redundant):
            came_from = {element.node1: None}
            to_visit = [element.node1]
            while element.node0 not in came_from:
                node = to_visit.pop()
                for t, neighbour, sign in adjacency.get(node, ()):
                    if neighbour not in came_from:
                        came_from[neighbour] = (t, node, sign)
                        to_visit.append(neighbour)
            node = element.node0
            while came_from[node] is not None:
                t, node, sign = came_from[node]
                loop[t][j] = sign

        M = jnp.array(loop, dtype=jnp.float64).reshape(len(tree), len(redundant))
        x = jnp.array(tree_currents, dtype=jnp.float64)
        normal = M.T @ M + jnp.eye(len(redundant))
        c = jnp.linalg.solve(normal, -(M.T @ x))
        adjusted, circulating = jax.device_get((x + M @ c, c))
        return adjusted.tolist(), circulating.tolist()

    def solve(self, backend: str | LinearSolverBackend | None = None) -> MNASolution:
        """
        Solve for node voltages and auxiliary branch currents.

        Raises:
            SingularMatrix: floating node or inconsistent loop of
                voltage-source-like elements
            NumericDivergence: NaN or infinity in the solved values
        """
        backend = get_backend(backend)
        self._check_connectivity()

        auxiliary = [
            (k, element) for k, element in enumerate(self.elements)
            if element.category is Category.AUXILIARY
        ]
        tree, redundant = self._spanning_auxiliary(auxiliary)

        unknown_nodes = [node for node in self.nodes if node != self.ground]
        node_index = {node: i for i, node in enumerate(unknown_nodes)}
        node_index[self.ground] = -1
        n_nodes = len(unknown_nodes)
        n_total = n_nodes + len(tree)

        rows: list[int] = []
        cols: list[int] = []
        vals: list[float] = []
        b_rows: list[int] = []
        b_vals: list[float] = []

        for element in self.elements:
            ia, ib = node_index[element.node0], node_index[element.node1]
            if element.category is Category.CONDUCTANCE:
                r, c, s = _compute_conductance_idx(ia, ib)
                g = 1.0 / element.value
                rows += r
                cols += c
                vals += [g * sign for sign in s]
            elif element.category is Category.INJECTION:
                if ia >= 0:
                    b_rows.append(ia)
                    b_vals.append(-element.value)
                if ib >= 0:
                    b_rows.append(ib)
                    b_vals.append(element.value)

        for position, (_, element) in enumerate(tree):
            k = n_nodes + position
            r, c, s = _compute_auxiliary_idx(node_index[element.node0], node_index[element.node1], k)
            rows += r
            cols += c
            vals += s
            b_rows.append(k)
            b_vals.append(element.value)

        logger.debug(
            "MNA system: %d nodes, %d auxiliary currents (%d redundant), %d elements",
            n_nodes, len(tree), len(redundant), len(self.elements),
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("circuit:\n%s", self)

        stamps = Stamps(n_total, tuple(rows), tuple(cols), tuple(vals), tuple(b_rows), tuple(b_vals))
        values = solve_stamps(backend, stamps)
        if not all(math.isfinite(v) for v in values):
            raise NumericDivergence(
                f"non-finite value in MNA solution of {n_total}x{n_total} system",
                quantity="mna_solution",
            )

        node_voltages = {self.ground: 0.0}
        for i, node in enumerate(unknown_nodes):
            node_voltages[node] = values[i]

        tree_currents = values[n_nodes:]
        redundant_currents: list[float] = []
        if redundant:
            tree_currents, redundant_currents = self._loop_currents(tree, redundant, tree_currents)

        auxiliary_currents = {}
        for (k, _), i in zip(tree, tree_currents):
            auxiliary_currents[k] = i
        for (k, _), i in zip(redundant, redundant_currents):
            auxiliary_currents[k] = i

        return MNASolution(node_voltages, self.elements, auxiliary_currents)
