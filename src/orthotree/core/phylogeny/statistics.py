"""Summary metrics computed by tree traversal."""

from __future__ import annotations

from orthotree.core.phylogeny.models import Internal, Leaf, Tree, TreeNode, TreeStatistics


def tree_statistics(tree: Tree) -> TreeStatistics:
    """Leaf count, total and average branch length, and maximum depth.

    Total branch length is the sum of every node's height (leaves count as
    zero); depth is measured in edges from the root.
    """
    leaves = 0
    total = 0.0
    max_depth = 0

    stack: list[tuple[TreeNode, int]] = [(tree.root, 0)]
    while stack:
        node, depth = stack.pop()
        total += node.height
        if isinstance(node, Leaf):
            leaves += 1
            max_depth = max(max_depth, depth)
        else:
            stack.append((node.right, depth + 1))
            stack.append((node.left, depth + 1))

    return TreeStatistics(
        leaves=leaves,
        total_branch_length=total,
        max_depth=max_depth,
        average_branch_length=total / leaves if leaves else 0.0,
    )


def root_to_leaf_lengths(tree: Tree) -> dict[str, float]:
    """Path length from the root to each leaf, keyed by taxon id.

    An edge's length is the parent's height minus the child's height, so
    for an ultrametric (UPGMA) tree every leaf sits at ``root.height``.
    """
    lengths: dict[str, float] = {}

    stack: list[tuple[TreeNode, float, float]] = [(tree.root, tree.root.height, 0.0)]
    while stack:
        node, parent_height, acc = stack.pop()
        acc += parent_height - node.height
        if isinstance(node, Internal):
            stack.append((node.right, node.height, acc))
            stack.append((node.left, node.height, acc))
        else:
            lengths[node.taxon.id] = acc

    return lengths
