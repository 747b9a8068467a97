"""
Data models for phylogenetic tree construction.

Tree nodes are an explicit sum type: a node is either a ``Leaf`` (one taxon,
no children) or an ``Internal`` node (exactly two children and a height).
Consumers dispatch with ``isinstance`` rather than checking optional fields.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Union

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from orthotree.core.phylogeny.clustering import TreeMethod


@dataclass(frozen=True)
class Taxon:
    """One orthologous gene placed as a tree leaf.

    Attributes:
        id: Opaque gene identifier (e.g., HGNC:1100)
        symbol: Display symbol used as the Newick label
        species: Species label (e.g., Homo sapiens)
        name: Full gene name, if known
    """

    id: str
    symbol: str
    species: str
    name: str | None = None


@dataclass(frozen=True)
class Leaf:
    """Terminal node referencing the taxon at ``index`` in the input list.

    ``symbol``, ``species`` and ``color`` stay None until the tree is
    annotated. A leaf's height is always zero.
    """

    index: int
    taxon: Taxon
    symbol: str | None = None
    species: str | None = None
    color: str | None = None

    @property
    def height(self) -> float:
        return 0.0


@dataclass(frozen=True)
class Internal:
    """Internal node joining exactly two subtrees.

    Attributes:
        left: First child
        right: Second child
        height: Branch length from this node to its children
        support: Optional clade support (0-100)
    """

    left: TreeNode
    right: TreeNode
    height: float = 0.0
    support: float | None = None

    def __post_init__(self) -> None:
        if self.height < 0:
            msg = f"Internal node height must be non-negative, got {self.height}"
            raise ValueError(msg)
        if self.support is not None and not 0 <= self.support <= 100:
            msg = f"Support must be between 0 and 100, got {self.support}"
            raise ValueError(msg)


TreeNode = Union[Leaf, Internal]


def iter_postorder(node: TreeNode) -> Iterator[TreeNode]:
    """Yield nodes children-first, left subtree before right."""
    stack: list[tuple[TreeNode, bool]] = [(node, False)]
    while stack:
        current, expanded = stack.pop()
        if isinstance(current, Internal) and not expanded:
            stack.append((current, True))
            stack.append((current.right, False))
            stack.append((current.left, False))
        else:
            yield current


def iter_leaves(node: TreeNode) -> Iterator[Leaf]:
    """Yield leaves left to right."""
    for n in iter_postorder(node):
        if isinstance(n, Leaf):
            yield n


@dataclass(frozen=True)
class Tree:
    """A rooted binary tree.

    A tree built from n >= 2 taxa has n leaves and n - 1 internal nodes.
    A single-taxon tree is just its leaf.
    """

    root: TreeNode

    @cached_property
    def leaf_count(self) -> int:
        return sum(1 for _ in iter_leaves(self.root))

    @cached_property
    def internal_count(self) -> int:
        return sum(1 for n in iter_postorder(self.root) if isinstance(n, Internal))

    def leaves(self) -> list[Leaf]:
        """Leaves in left-to-right order."""
        return list(iter_leaves(self.root))

    def leaf_ids(self) -> frozenset[str]:
        return frozenset(leaf.taxon.id for leaf in iter_leaves(self.root))


class TreeStatistics(BaseModel):
    """Summary metrics of a tree."""

    leaves: int = Field(ge=0, description="Number of leaves")
    total_branch_length: float = Field(description="Sum of all node heights")
    max_depth: int = Field(ge=0, description="Longest root-to-leaf path in edges")
    average_branch_length: float = Field(
        description="Total branch length divided by leaf count"
    )

    model_config = {"frozen": True}


class TreeComparison(BaseModel):
    """Partition-based comparison of two trees."""

    robinson_foulds: int = Field(
        ge=0, description="Clades present in exactly one of the two trees"
    )
    similarity: float = Field(
        ge=0, le=1, description="Shared clades divided by all distinct clades"
    )

    model_config = {"frozen": True}


@dataclass(frozen=True)
class TreeResult:
    """Annotated tree bundled with its Newick text and statistics."""

    tree: Tree
    newick: str
    statistics: TreeStatistics
    method: TreeMethod
    taxa: tuple[Taxon, ...] = field(default=())
