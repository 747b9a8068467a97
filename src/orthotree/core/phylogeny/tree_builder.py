"""Build annotated phylogenetic trees from taxa or distance matrices.

This module wires the pipeline stages together: distance matrix, clustering
(neighbor-joining or UPGMA), annotation, Newick serialization and summary
statistics. Every stage is a pure function; nothing is cached between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import pandas as pd

from orthotree.core.phylogeny.annotation import annotate_tree
from orthotree.core.phylogeny.clustering import TreeMethod, cluster
from orthotree.core.phylogeny.distance import (
    DistanceFunction,
    DistanceMatrix,
    DivergenceTimeDistance,
    build_distance_matrix,
)
from orthotree.core.phylogeny.models import Taxon, TreeResult
from orthotree.core.phylogeny.newick import to_newick
from orthotree.core.phylogeny.statistics import tree_statistics
from orthotree.models.config import PhylogenyConfig

logger = logging.getLogger(__name__)


def default_distance(config: PhylogenyConfig | None = None) -> DivergenceTimeDistance:
    """Divergence-time distance strategy configured from ``config``."""
    config = config or PhylogenyConfig()
    return DivergenceTimeDistance(
        config.divergence_times,
        default_divergence=config.default_divergence,
        scale=config.divergence_scale,
    )


def build_tree_from_matrix(
    matrix: DistanceMatrix,
    method: str | TreeMethod = TreeMethod.NEIGHBOR_JOINING,
    *,
    config: PhylogenyConfig | None = None,
) -> TreeResult:
    """Cluster a distance matrix and annotate the resulting tree.

    Args:
        matrix: Validated distance matrix.
        method: "neighbor_joining" (or "nj") or "upgma".
        config: Output settings (Newick precision, labels, colors).

    Returns:
        TreeResult with the annotated tree, Newick text and statistics.

    Raises:
        UnknownMethodError: If the method is not recognized.
        InvalidTaxonListError: If the matrix has no taxa.
    """
    config = config or PhylogenyConfig()
    method = TreeMethod.parse(method)

    raw = cluster(matrix, method)
    tree = annotate_tree(raw, matrix.taxa, colors=config.species_colors)
    newick = to_newick(tree, precision=config.newick_precision, label=config.newick_label)
    statistics = tree_statistics(tree)

    logger.info(
        f"Built {method.value} tree: {statistics.leaves} leaves, "
        f"total branch length {statistics.total_branch_length:.4f}"
    )
    return TreeResult(
        tree=tree,
        newick=newick,
        statistics=statistics,
        method=method,
        taxa=matrix.taxa,
    )


def build_tree(
    taxa: Sequence[Taxon],
    distance_strategy: DistanceFunction | None = None,
    method: str | TreeMethod = TreeMethod.NEIGHBOR_JOINING,
    *,
    config: PhylogenyConfig | None = None,
) -> TreeResult:
    """Build a phylogenetic tree for an ordered list of taxa.

    The method is validated before any distance is computed, and the
    distance strategy is evaluated once per taxon pair.

    Args:
        taxa: Ordered taxa; leaf positions follow this order.
        distance_strategy: Callable ``(a, b) -> float >= 0``. Defaults to the
            divergence-time lookup configured by ``config``.
        method: "neighbor_joining" (or "nj") or "upgma".
        config: Distance and output settings.

    Returns:
        TreeResult with the annotated tree, Newick text and statistics.

    Raises:
        UnknownMethodError: If the method is not recognized.
        InvalidTaxonListError: If taxa is empty or has duplicate ids.
        AsymmetricOrNegativeDistanceError: If the strategy returns a negative
            or non-finite distance.
    """
    config = config or PhylogenyConfig()
    method = TreeMethod.parse(method)
    distance = distance_strategy or default_distance(config)

    matrix = build_distance_matrix(taxa, distance)
    return build_tree_from_matrix(matrix, method, config=config)


def build_tree_from_frame(
    frame: pd.DataFrame,
    method: str | TreeMethod = TreeMethod.NEIGHBOR_JOINING,
    *,
    config: PhylogenyConfig | None = None,
) -> TreeResult:
    """Build a tree from a square distance DataFrame labelled on both axes."""
    method = TreeMethod.parse(method)
    return build_tree_from_matrix(DistanceMatrix.from_frame(frame), method, config=config)
