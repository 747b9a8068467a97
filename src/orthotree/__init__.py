"""
Orthotree: distance-based phylogenetic trees for orthologous gene families.

Builds neighbor-joining or UPGMA trees from ortholog sets retrieved from the
Alliance of Genome Resources (or supplied as files), writes them as Newick,
and compares trees by their shared clades.
"""

__version__ = "0.1.0"
__author__ = "Orthotree Team"

from orthotree.core.phylogeny import (
    Taxon,
    Tree,
    TreeResult,
    build_tree,
    compare_trees,
    to_newick,
)

__all__ = [
    "Taxon",
    "Tree",
    "TreeResult",
    "build_tree",
    "compare_trees",
    "to_newick",
    "__version__",
]
