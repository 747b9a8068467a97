"""Pairwise distance matrices over an ordered taxon list.

A ``DistanceMatrix`` is built once per request, either from a pluggable
distance strategy (``build_distance_matrix``) or from caller-supplied values
(``DistanceMatrix.from_values``), and is read-only afterwards.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd

from orthotree.core.constants import (
    DEFAULT_DIVERGENCE,
    DISTANCE_TOLERANCE,
    DIVERGENCE_SCALE,
    DIVERGENCE_TIMES,
)
from orthotree.core.exceptions import (
    AsymmetricOrNegativeDistanceError,
    InvalidTaxonListError,
)
from orthotree.core.phylogeny.models import Taxon

logger = logging.getLogger(__name__)

DistanceFunction = Callable[[Taxon, Taxon], float]


def validate_taxa(taxa: Sequence[Taxon]) -> tuple[Taxon, ...]:
    """Check the taxon list is non-empty with unique ids.

    Raises:
        InvalidTaxonListError: If the list is empty or ids repeat.
    """
    if len(taxa) == 0:
        raise InvalidTaxonListError()

    seen: set[str] = set()
    duplicates: list[str] = []
    for taxon in taxa:
        if taxon.id in seen:
            duplicates.append(taxon.id)
        seen.add(taxon.id)
    if duplicates:
        raise InvalidTaxonListError(
            f"Taxon list contains duplicate ids: {', '.join(sorted(set(duplicates))[:5])}"
        )
    return tuple(taxa)


@dataclass(frozen=True, eq=False)
class DistanceMatrix:
    """Symmetric, non-negative distance table indexed by taxon position."""

    taxa: tuple[Taxon, ...]
    values: np.ndarray

    def __len__(self) -> int:
        return len(self.taxa)

    def distance(self, i: int, j: int) -> float:
        return float(self.values[i, j])

    @classmethod
    def from_values(
        cls,
        taxa: Sequence[Taxon],
        values: Sequence[Sequence[float]] | np.ndarray,
    ) -> DistanceMatrix:
        """Validate and wrap a precomputed matrix.

        Args:
            taxa: Ordered taxa labelling rows and columns.
            values: Square matrix of pairwise distances.

        Returns:
            Read-only DistanceMatrix.

        Raises:
            InvalidTaxonListError: If taxa is empty or has duplicate ids.
            AsymmetricOrNegativeDistanceError: If the values are not a valid
                symmetric, non-negative matrix with zero diagonal.
        """
        taxa = validate_taxa(taxa)
        try:
            array = np.array(values, dtype=float)
        except (TypeError, ValueError) as e:
            raise AsymmetricOrNegativeDistanceError(
                f"values are not a numeric square matrix: {e}"
            ) from e
        n = len(taxa)

        if array.ndim != 2 or array.shape[0] != array.shape[1]:
            raise AsymmetricOrNegativeDistanceError(
                f"matrix is not square (shape {array.shape})"
            )
        if array.shape[0] != n:
            raise AsymmetricOrNegativeDistanceError(
                f"matrix size {array.shape[0]} does not match {n} taxa"
            )
        if not np.all(np.isfinite(array)):
            raise AsymmetricOrNegativeDistanceError("matrix contains NaN or infinite values")
        if np.any(array < 0):
            i, j = np.argwhere(array < 0)[0]
            raise AsymmetricOrNegativeDistanceError(
                f"negative distance {array[i, j]} between "
                f"{taxa[i].id} and {taxa[j].id}"
            )
        if np.any(np.abs(np.diag(array)) > DISTANCE_TOLERANCE):
            raise AsymmetricOrNegativeDistanceError("diagonal entries must be zero")
        asymmetric = np.abs(array - array.T) > DISTANCE_TOLERANCE
        if np.any(asymmetric):
            i, j = np.argwhere(asymmetric)[0]
            raise AsymmetricOrNegativeDistanceError(
                f"d({taxa[i].id}, {taxa[j].id}) = {array[i, j]} but "
                f"d({taxa[j].id}, {taxa[i].id}) = {array[j, i]}"
            )

        # Mirror the upper triangle so the stored matrix is exactly symmetric
        upper = np.triu(array, k=1)
        array = upper + upper.T
        array.flags.writeable = False
        return cls(taxa=taxa, values=array)

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> DistanceMatrix:
        """Build from a square DataFrame labelled by taxon on both axes.

        Row labels become taxon ids and symbols; species is left empty.
        """
        labels = [str(label) for label in frame.columns]
        index_labels = [str(label) for label in frame.index]
        if index_labels != labels:
            raise AsymmetricOrNegativeDistanceError(
                "row labels do not match column labels"
            )
        taxa = [Taxon(id=label, symbol=label, species="") for label in labels]
        return cls.from_values(taxa, frame.to_numpy(dtype=float))

    def to_frame(self) -> pd.DataFrame:
        """Labelled copy of the matrix, indexed by taxon id."""
        ids = [taxon.id for taxon in self.taxa]
        return pd.DataFrame(np.array(self.values), index=ids, columns=ids)


def build_distance_matrix(
    taxa: Sequence[Taxon],
    distance: DistanceFunction,
) -> DistanceMatrix:
    """Evaluate ``distance`` over every unordered taxon pair.

    The strategy is called exactly once per pair (i < j) and the result is
    mirrored. Input order is preserved.

    Args:
        taxa: Ordered taxa (at least one).
        distance: Callable returning a finite, non-negative distance.

    Returns:
        Read-only n x n DistanceMatrix.

    Raises:
        InvalidTaxonListError: If taxa is empty or has duplicate ids.
        AsymmetricOrNegativeDistanceError: If the strategy returns a negative
            or non-finite value.
    """
    taxa = validate_taxa(taxa)
    n = len(taxa)
    values = np.zeros((n, n), dtype=float)

    for i in range(n):
        for j in range(i + 1, n):
            d = float(distance(taxa[i], taxa[j]))
            if not math.isfinite(d) or d < 0:
                raise AsymmetricOrNegativeDistanceError(
                    f"distance strategy returned {d} for "
                    f"{taxa[i].id} and {taxa[j].id}"
                )
            values[i, j] = d
            values[j, i] = d

    values.flags.writeable = False
    logger.debug(f"Built {n}x{n} distance matrix")
    return DistanceMatrix(taxa=taxa, values=values)


class DivergenceTimeDistance:
    """Distance from the gap between species divergence times.

    Each species maps to an approximate divergence time from human (My);
    the distance between two taxa is the absolute difference divided by
    ``scale``. Genes from the same species are at distance zero. This is a
    coarse species-level proxy, not a sequence-based distance.
    """

    def __init__(
        self,
        divergence_times: Mapping[str, float] | None = None,
        *,
        default_divergence: float = DEFAULT_DIVERGENCE,
        scale: float = DIVERGENCE_SCALE,
    ):
        if scale <= 0:
            msg = f"scale must be positive, got {scale}"
            raise ValueError(msg)
        self.divergence_times = dict(
            DIVERGENCE_TIMES if divergence_times is None else divergence_times
        )
        self.default_divergence = default_divergence
        self.scale = scale

    def divergence(self, species: str) -> float:
        return self.divergence_times.get(species, self.default_divergence)

    def __call__(self, a: Taxon, b: Taxon) -> float:
        return abs(self.divergence(a.species) - self.divergence(b.species)) / self.scale
