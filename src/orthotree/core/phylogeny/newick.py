"""Newick serialization of binary trees.

Output grammar::

    leaf     := <label>:<height>
    internal := (<left>,<right>)[<support>]:<height>
    tree     := <node>;

The bracketed support segment is omitted when a node has no support value.
Numbers are written fixed-point with ``precision`` decimal places (6 by
default) and trailing zeros removed, so output is byte-stable across runs.
"""

from __future__ import annotations

import re
from io import StringIO
from typing import TYPE_CHECKING, Literal

from orthotree.core.constants import NEWICK_PRECISION, NEWICK_RESERVED_CHARS
from orthotree.core.exceptions import NewickParseError
from orthotree.core.phylogeny.models import (
    Internal,
    Leaf,
    Taxon,
    Tree,
    TreeNode,
    iter_postorder,
)

if TYPE_CHECKING:
    from Bio.Phylo.BaseTree import Clade

LabelStyle = Literal["symbol", "id", "symbol_species"]

_DISALLOWED = re.compile(r"[\s" + re.escape(NEWICK_RESERVED_CHARS) + "]")


def sanitize_label(name: str) -> str:
    """Replace whitespace and Newick structural characters with ``_``."""
    return _DISALLOWED.sub("_", name)


def format_number(value: float, precision: int = NEWICK_PRECISION) -> str:
    """Fixed-point text with trailing zeros stripped (``0.750000`` -> ``0.75``)."""
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-0"):
        text = "0"
    return text


def leaf_label(leaf: Leaf, style: LabelStyle = "symbol") -> str:
    """Unsanitized label of a leaf under the given style."""
    symbol = leaf.symbol if leaf.symbol is not None else leaf.taxon.symbol
    if style == "id":
        return leaf.taxon.id
    if style == "symbol_species":
        species = leaf.species if leaf.species is not None else leaf.taxon.species
        return f"{symbol}_{species}" if species else symbol
    return symbol


def to_newick(
    tree: Tree,
    *,
    precision: int = NEWICK_PRECISION,
    label: LabelStyle = "symbol",
) -> str:
    """Render ``tree`` as a Newick string terminated by ``;``.

    Args:
        tree: Tree to serialize.
        precision: Decimal places for heights and support values.
        label: Leaf label style: "symbol" (default), "id", or
            "symbol_species".

    Returns:
        Newick text.
    """
    rendered: dict[int, str] = {}
    for node in iter_postorder(tree.root):
        height = format_number(node.height, precision)
        if isinstance(node, Leaf):
            rendered[id(node)] = f"{sanitize_label(leaf_label(node, label))}:{height}"
            continue
        support = (
            f"[{format_number(node.support, precision)}]"
            if node.support is not None
            else ""
        )
        left = rendered.pop(id(node.left))
        right = rendered.pop(id(node.right))
        rendered[id(node)] = f"({left},{right}){support}:{height}"

    return rendered[id(tree.root)] + ";"


def _support_from_clade(clade: Clade) -> float | None:
    if clade.confidence is not None:
        return float(clade.confidence)
    comment = getattr(clade, "comment", None)
    if comment:
        try:
            return float(comment)
        except ValueError:
            return None
    return None


def tree_from_newick(text: str, source: str | None = None) -> Tree:
    """Read a strictly bifurcating Newick tree.

    Leaves become taxa whose id and symbol are the tip name (species is
    empty). An internal node's branch length is read as its height and a
    numeric bracket comment as its support. Leaf branch lengths are ignored
    since leaves always have height zero.

    Args:
        text: Newick text.
        source: Optional description of where the text came from, used in
            error messages.

    Returns:
        Tree with leaves indexed left to right.

    Raises:
        NewickParseError: If the text is not a single valid binary tree with
            unique, non-empty tip names.
    """
    from Bio import Phylo
    from Bio.Phylo.NewickIO import NewickError

    try:
        parsed = Phylo.read(StringIO(text.strip()), "newick")
    except (NewickError, ValueError) as e:
        raise NewickParseError(str(e), source) from e

    seen: set[str] = set()
    built: dict[int, TreeNode] = {}
    stack: list[tuple[Clade, bool]] = [(parsed.root, False)]

    while stack:
        clade, expanded = stack.pop()
        if clade.is_terminal():
            name = clade.name
            if not name:
                raise NewickParseError("tip without a name", source)
            if name in seen:
                raise NewickParseError(f"duplicate tip name '{name}'", source)
            built[id(clade)] = Leaf(
                index=len(seen), taxon=Taxon(id=name, symbol=name, species="")
            )
            seen.add(name)
            continue

        if not expanded:
            if len(clade.clades) != 2:
                raise NewickParseError(
                    f"node with {len(clade.clades)} children (expected 2)", source
                )
            stack.append((clade, True))
            stack.append((clade.clades[1], False))
            stack.append((clade.clades[0], False))
            continue

        try:
            built[id(clade)] = Internal(
                left=built.pop(id(clade.clades[0])),
                right=built.pop(id(clade.clades[1])),
                height=float(clade.branch_length or 0.0),
                support=_support_from_clade(clade),
            )
        except ValueError as e:
            raise NewickParseError(str(e), source) from e

    return Tree(root=built[id(parsed.root)])
