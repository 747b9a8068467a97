"""Robinson-Foulds comparison of trees by their clades."""

from __future__ import annotations

import logging

from orthotree.core.phylogeny.models import (
    Internal,
    Tree,
    TreeComparison,
    TreeNode,
    iter_leaves,
    iter_postorder,
)

logger = logging.getLogger(__name__)


def clade_of(node: TreeNode) -> frozenset[str]:
    """Leaf ids beneath ``node``."""
    return frozenset(leaf.taxon.id for leaf in iter_leaves(node))


def bipartitions(tree: Tree) -> set[frozenset[str]]:
    """Clade of every internal node, the root clade included."""
    return {
        clade_of(node)
        for node in iter_postorder(tree.root)
        if isinstance(node, Internal)
    }


def compare_trees(tree_a: Tree, tree_b: Tree) -> TreeComparison:
    """Compare two trees by their clade sets.

    ``robinson_foulds`` counts clades found in exactly one tree and
    ``similarity`` is shared clades over all distinct clades. The trees do
    not need the same leaf set; unmatched clades simply do not intersect.
    Two single-leaf trees (no clades) are identical only when their leaves
    match.

    Args:
        tree_a: First tree.
        tree_b: Second tree.

    Returns:
        TreeComparison with robinson_foulds and similarity.
    """
    clades_a = bipartitions(tree_a)
    clades_b = bipartitions(tree_b)

    shared = len(clades_a & clades_b)
    union = len(clades_a | clades_b)

    if union == 0:
        similarity = 1.0 if tree_a.leaf_ids() == tree_b.leaf_ids() else 0.0
    else:
        similarity = shared / union

    logger.debug(
        f"Compared trees: {len(clades_a)} vs {len(clades_b)} clades, {shared} shared"
    )
    return TreeComparison(robinson_foulds=union - shared, similarity=similarity)
