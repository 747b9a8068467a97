"""Visualization-ready nested layout of a tree."""

from __future__ import annotations

from typing import Any

from orthotree.core.constants import (
    LAYOUT_ORIGIN_X,
    LAYOUT_ORIGIN_Y,
    LAYOUT_X_SPREAD,
    LAYOUT_Y_STEP,
)
from orthotree.core.phylogeny.models import Internal, Leaf, Tree, TreeNode, iter_postorder


def to_layout(tree: Tree) -> dict[str, Any]:
    """Nested dict of node positions for drawing the tree.

    The root sits at (300, 50). Children are placed one step lower, shifted
    left or right by ``50 / (depth + 1)`` so deeper levels spread less.
    Leaves carry ``name`` ("<symbol> (<species>)"), ``species`` and ``color``;
    internal nodes carry ``children`` and ``support``. Internal ids number
    from the leaf count upward in post-order; the root is ``root``.

    Example:
        >>> layout = to_layout(tree)
        >>> layout["children"][0]["x"]
        250.0
    """
    internal_ids: dict[int, str] = {}
    counter = tree.leaf_count
    for node in iter_postorder(tree.root):
        if isinstance(node, Internal):
            internal_ids[id(node)] = f"internal_{counter}"
            counter += 1

    layout: dict[str, Any] = {}
    # (node, x, y, depth, parent's children list or None for the root)
    stack: list[tuple[TreeNode, float, float, int, list | None]] = [
        (tree.root, LAYOUT_ORIGIN_X, LAYOUT_ORIGIN_Y, 0, None)
    ]
    while stack:
        node, x, y, depth, siblings = stack.pop()
        if isinstance(node, Leaf):
            symbol = node.symbol if node.symbol is not None else node.taxon.symbol
            species = node.species if node.species is not None else node.taxon.species
            entry: dict[str, Any] = {
                "id": f"leaf_{node.index}",
                "x": x,
                "y": y,
                "depth": depth,
                "name": f"{symbol} ({species})",
                "species": species,
                "color": node.color,
            }
        else:
            children: list[dict[str, Any]] = []
            entry = {
                "id": "root" if node is tree.root else internal_ids[id(node)],
                "x": x,
                "y": y,
                "depth": depth,
                "children": children,
                "support": node.support,
            }
            offset = LAYOUT_X_SPREAD / (depth + 1)
            stack.append((node.right, x + offset, y + LAYOUT_Y_STEP, depth + 1, children))
            stack.append((node.left, x - offset, y + LAYOUT_Y_STEP, depth + 1, children))

        if siblings is None:
            layout = entry
        else:
            siblings.append(entry)

    return layout
