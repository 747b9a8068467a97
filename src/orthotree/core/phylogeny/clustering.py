"""Agglomerative tree construction: Neighbor-Joining and UPGMA.

Both algorithms work on an ``_ActiveClusterSet``: an append-only arena of
nodes, the ordered list of arena indices not yet merged, and a distance
table over arena indices. Each merge removes two active entries and appends
the new node at the end, so the enumeration order of the active set is
stable and the tie-break rule (lowest position pair wins) is reproducible.
"""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np

from orthotree.core.exceptions import InvalidTaxonListError, UnknownMethodError
from orthotree.core.phylogeny.distance import DistanceMatrix
from orthotree.core.phylogeny.models import Internal, Leaf, Tree, TreeNode

logger = logging.getLogger(__name__)


class TreeMethod(str, Enum):
    """Distance-based tree building method."""

    NEIGHBOR_JOINING = "neighbor_joining"
    UPGMA = "upgma"

    @classmethod
    def parse(cls, method: str | TreeMethod) -> TreeMethod:
        """Resolve a method name, accepting the short alias ``nj``.

        Raises:
            UnknownMethodError: If the name is not recognized.
        """
        if isinstance(method, cls):
            return method
        name = str(method).strip().lower()
        if name == "nj":
            return cls.NEIGHBOR_JOINING
        try:
            return cls(name)
        except ValueError:
            raise UnknownMethodError(str(method), [m.value for m in cls]) from None


class _ActiveClusterSet:
    """Working state for one tree construction. Discarded afterwards."""

    def __init__(self, matrix: DistanceMatrix):
        n = len(matrix)
        self.nodes: list[TreeNode] = [
            Leaf(index=i, taxon=taxon) for i, taxon in enumerate(matrix.taxa)
        ]
        self.sizes: list[int] = [1] * n
        capacity = 2 * n - 1
        self.distances = np.zeros((capacity, capacity), dtype=float)
        self.distances[:n, :n] = matrix.values
        self.active: list[int] = list(range(n))

    def __len__(self) -> int:
        return len(self.active)

    def active_distances(self) -> np.ndarray:
        """Reduced distance matrix over the active set, in enumeration order."""
        idx = np.array(self.active)
        return self.distances[np.ix_(idx, idx)]

    def size(self, position: int) -> int:
        return self.sizes[self.active[position]]

    def merge(
        self,
        a: int,
        b: int,
        height: float,
        distances_to_rest: np.ndarray,
    ) -> Internal:
        """Join active positions ``a`` < ``b`` under a new node.

        ``distances_to_rest`` holds the new node's distance to every other
        active entry, in enumeration order with ``a`` and ``b`` skipped.
        """
        i, j = self.active[a], self.active[b]
        node = Internal(left=self.nodes[i], right=self.nodes[j], height=float(height))

        u = len(self.nodes)
        self.nodes.append(node)
        self.sizes.append(self.sizes[i] + self.sizes[j])

        rest = [k for pos, k in enumerate(self.active) if pos != a and pos != b]
        if rest:
            self.distances[u, rest] = distances_to_rest
            self.distances[rest, u] = distances_to_rest
        self.active = rest + [u]
        return node

    def root(self) -> TreeNode:
        if len(self.active) != 1:
            msg = f"Construction incomplete: {len(self.active)} active clusters remain"
            raise RuntimeError(msg)
        return self.nodes[self.active[0]]


def _argmin_pair(values: np.ndarray) -> tuple[int, int]:
    """Position pair (i < j) of the smallest off-diagonal value.

    numpy's argmin returns the first minimum in row-major order, which is the
    lowest (i, j) pair among ties.
    """
    k = values.shape[0]
    upper = np.triu(np.ones((k, k), dtype=bool), k=1)
    masked = np.where(upper, values, np.inf)
    i, j = divmod(int(np.argmin(masked)), k)
    return i, j


def _others(k: int, a: int, b: int) -> list[int]:
    return [p for p in range(k) if p != a and p != b]


def _trivial_tree(matrix: DistanceMatrix) -> Tree | None:
    """Tree for fewer than three taxa, or None when clustering is needed."""
    n = len(matrix)
    if n == 0:
        raise InvalidTaxonListError()
    if n == 1:
        logger.warning("Only one taxon supplied; tree is a single leaf")
        return Tree(root=Leaf(index=0, taxon=matrix.taxa[0]))
    if n == 2:
        return Tree(
            root=Internal(
                left=Leaf(index=0, taxon=matrix.taxa[0]),
                right=Leaf(index=1, taxon=matrix.taxa[1]),
                height=matrix.distance(0, 1) / 2,
            )
        )
    return None


def neighbor_joining(matrix: DistanceMatrix) -> Tree:
    """Build a tree by Neighbor-Joining.

    At each step the pair minimizing
    ``Q(i, j) = (k - 2) * d(i, j) - R(i) - R(j)`` is joined. The new node's
    height is the midpoint ``d(i, j) / 2`` rather than the asymmetric
    per-child NJ branch lengths. The last two active nodes are joined under
    the root, so the topology is rooted at the final merge.

    Args:
        matrix: Validated distance matrix.

    Returns:
        Binary tree with n leaves and n - 1 internal nodes (n >= 2).

    Raises:
        InvalidTaxonListError: If the matrix is empty.
    """
    trivial = _trivial_tree(matrix)
    if trivial is not None:
        return trivial

    clusters = _ActiveClusterSet(matrix)
    while len(clusters) > 2:
        d = clusters.active_distances()
        k = d.shape[0]
        row_sums = d.sum(axis=1)
        q = (k - 2) * d - row_sums[:, None] - row_sums[None, :]

        a, b = _argmin_pair(q)
        d_ab = d[a, b]
        rest = _others(k, a, b)
        reduced = (d[a, rest] + d[b, rest] - d_ab) / 2

        # Non-additive input can drive reduced distances below zero
        node = clusters.merge(a, b, height=max(d_ab / 2, 0.0), distances_to_rest=reduced)
        logger.debug(f"NJ merge at k={k}: positions ({a}, {b}), height {node.height:.6g}")

    d = clusters.active_distances()
    clusters.merge(0, 1, height=max(d[0, 1] / 2, 0.0), distances_to_rest=np.empty(0))
    return Tree(root=clusters.root())


def upgma(matrix: DistanceMatrix) -> Tree:
    """Build an ultrametric tree by UPGMA (size-weighted average linkage).

    The closest pair of active clusters is merged at height ``d / 2`` and the
    merged cluster's distance to every other cluster ``m`` becomes
    ``(|a| * d(a, m) + |b| * d(b, m)) / (|a| + |b|)``.

    Args:
        matrix: Validated distance matrix.

    Returns:
        Binary tree with n leaves and n - 1 internal nodes (n >= 2).

    Raises:
        InvalidTaxonListError: If the matrix is empty.
    """
    trivial = _trivial_tree(matrix)
    if trivial is not None:
        return trivial

    clusters = _ActiveClusterSet(matrix)
    while len(clusters) > 1:
        d = clusters.active_distances()
        k = d.shape[0]
        a, b = _argmin_pair(d)
        size_a, size_b = clusters.size(a), clusters.size(b)
        rest = _others(k, a, b)
        merged = (size_a * d[a, rest] + size_b * d[b, rest]) / (size_a + size_b)

        node = clusters.merge(a, b, height=d[a, b] / 2, distances_to_rest=merged)
        logger.debug(
            f"UPGMA merge at k={k}: positions ({a}, {b}), sizes "
            f"{size_a}+{size_b}, height {node.height:.6g}"
        )

    return Tree(root=clusters.root())


def cluster(matrix: DistanceMatrix, method: str | TreeMethod) -> Tree:
    """Dispatch to the clustering algorithm named by ``method``."""
    method = TreeMethod.parse(method)
    if method == TreeMethod.NEIGHBOR_JOINING:
        return neighbor_joining(matrix)
    return upgma(matrix)
