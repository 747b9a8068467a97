"""Phylogeny module for distance-based tree construction.

Provides distance matrices over ordered taxa, neighbor-joining and UPGMA
clustering, leaf annotation, Newick reading and writing, Robinson-Foulds
comparison, summary statistics and ortholog conservation summaries.
"""

from orthotree.core.phylogeny.annotation import annotate_tree
from orthotree.core.phylogeny.clustering import TreeMethod, neighbor_joining, upgma
from orthotree.core.phylogeny.comparison import bipartitions, compare_trees
from orthotree.core.phylogeny.conservation import (
    ConservationSummary,
    OrthologScore,
    conservation_score,
    interpret_conservation,
)
from orthotree.core.phylogeny.distance import (
    DistanceMatrix,
    DivergenceTimeDistance,
    build_distance_matrix,
)
from orthotree.core.phylogeny.layout import to_layout
from orthotree.core.phylogeny.models import (
    Internal,
    Leaf,
    Taxon,
    Tree,
    TreeComparison,
    TreeNode,
    TreeResult,
    TreeStatistics,
)
from orthotree.core.phylogeny.newick import sanitize_label, to_newick, tree_from_newick
from orthotree.core.phylogeny.statistics import root_to_leaf_lengths, tree_statistics
from orthotree.core.phylogeny.tree_builder import (
    build_tree,
    build_tree_from_frame,
    build_tree_from_matrix,
)

__all__ = [
    "ConservationSummary",
    "DistanceMatrix",
    "DivergenceTimeDistance",
    "Internal",
    "Leaf",
    "OrthologScore",
    "Taxon",
    "Tree",
    "TreeComparison",
    "TreeMethod",
    "TreeNode",
    "TreeResult",
    "TreeStatistics",
    "annotate_tree",
    "bipartitions",
    "build_distance_matrix",
    "build_tree",
    "build_tree_from_frame",
    "build_tree_from_matrix",
    "compare_trees",
    "conservation_score",
    "interpret_conservation",
    "neighbor_joining",
    "root_to_leaf_lengths",
    "sanitize_label",
    "to_layout",
    "to_newick",
    "tree_from_newick",
    "tree_statistics",
    "upgma",
]
