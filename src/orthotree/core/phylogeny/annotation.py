"""Attach display metadata to a built tree."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence

from orthotree.core.constants import DEFAULT_SPECIES_COLOR, SPECIES_COLORS
from orthotree.core.phylogeny.comparison import clade_of
from orthotree.core.phylogeny.models import (
    Internal,
    Leaf,
    Taxon,
    Tree,
    TreeNode,
    iter_postorder,
)


def annotate_tree(
    tree: Tree,
    taxa: Sequence[Taxon] | None = None,
    *,
    colors: Mapping[str, str] | None = None,
    support: Mapping[frozenset[str], float] | None = None,
) -> Tree:
    """Return a copy of ``tree`` with leaf metadata filled in.

    Each leaf receives the symbol and species of the taxon at its input
    position, plus a display color for its species. Internal nodes keep
    ``support`` unset unless a value is supplied for their clade (the set
    of leaf ids beneath them); no resampling is performed here.

    Args:
        tree: Tree produced by a clustering method.
        taxa: Input taxa, indexed by leaf position. Defaults to the taxa
            already referenced by the leaves.
        colors: Species to hex color mapping. Defaults to SPECIES_COLORS.
        support: Optional clade support values (0-100) keyed by leaf-id set.

    Returns:
        New annotated Tree; the input tree is not modified.

    Raises:
        IndexError: If a leaf index is outside ``taxa``.
        ValueError: If a support value is outside 0-100.
    """
    palette = SPECIES_COLORS if colors is None else colors
    support = support or {}

    # Keyed by id() of the source node; children are built before parents
    built: dict[int, TreeNode] = {}
    for node in iter_postorder(tree.root):
        if isinstance(node, Leaf):
            taxon = node.taxon if taxa is None else taxa[node.index]
            built[id(node)] = dataclasses.replace(
                node,
                taxon=taxon,
                symbol=taxon.symbol,
                species=taxon.species,
                color=palette.get(taxon.species, DEFAULT_SPECIES_COLOR),
            )
            continue

        annotated = Internal(
            left=built.pop(id(node.left)),
            right=built.pop(id(node.right)),
            height=node.height,
            support=node.support,
        )
        if support:
            value = support.get(clade_of(annotated))
            if value is not None:
                annotated = dataclasses.replace(annotated, support=float(value))
        built[id(node)] = annotated

    return Tree(root=built[id(tree.root)])
