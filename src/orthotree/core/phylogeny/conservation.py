"""
Conservation summary of a gene across its orthologs.

Each ortholog carries a score in [0, 1] when the source provides one.
The gene's conservation is the mean over scored orthologs; orthologs
without a score are counted but left out of the mean.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Average above which a gene is reported as highly conserved
HIGHLY_CONSERVED_THRESHOLD = 0.7

# (lower bound, interpretation), checked top-down with a strict ">"
CONSERVATION_BANDS: tuple[tuple[float, str], ...] = (
    (0.9, "Ultra-conserved: Essential for basic cellular function"),
    (0.7, "Highly conserved: Important for core biological processes"),
    (0.5, "Moderately conserved: Some functional conservation"),
    (0.3, "Weakly conserved: Limited functional similarity"),
)
POORLY_CONSERVED = "Poorly conserved: Significant evolutionary divergence"


@dataclass(frozen=True)
class OrthologScore:
    """Conservation score of one ortholog.

    Attributes:
        id: Gene identifier of the ortholog
        symbol: Gene symbol
        species: Species name
        score: Score in [0, 1], or None when the source gives none
    """

    id: str
    symbol: str
    species: str
    score: float | None = None

    def __post_init__(self) -> None:
        if self.score is not None and not 0 <= self.score <= 1:
            msg = f"Conservation score must be between 0 and 1, got {self.score}"
            raise ValueError(msg)


class ConservationSummary(BaseModel):
    """Average ortholog conservation of a gene."""

    gene: str = Field(description="Query gene identifier")
    orthologs: int = Field(ge=0, description="Orthologs considered")
    scored: int = Field(ge=0, description="Orthologs that carried a score")
    average: float | None = Field(
        default=None, ge=0, le=1, description="Mean score over scored orthologs"
    )
    highly_conserved: bool = Field(
        default=False, description="Average above the highly conserved threshold"
    )
    interpretation: str | None = Field(
        default=None, description="Conservation band of the average"
    )

    model_config = {"frozen": True}


def interpret_conservation(score: float) -> str:
    """Describe a conservation score by band.

    Example:
        >>> interpret_conservation(0.75)
        'Highly conserved: Important for core biological processes'
    """
    for bound, text in CONSERVATION_BANDS:
        if score > bound:
            return text
    return POORLY_CONSERVED


def conservation_score(gene_id: str, orthologs: Iterable[OrthologScore]) -> ConservationSummary:
    """Summarize conservation of ``gene_id`` from its ortholog scores.

    Args:
        gene_id: Query gene identifier.
        orthologs: Ortholog scores; unscored entries are skipped in the mean.

    Returns:
        Summary with ``average``, ``highly_conserved`` and
        ``interpretation`` left empty when no ortholog is scored.
    """
    entries = list(orthologs)
    scores = [o.score for o in entries if o.score is not None]

    if not scores:
        if entries:
            logger.warning(f"None of the {len(entries)} orthologs of {gene_id} carry a score")
        return ConservationSummary(gene=gene_id, orthologs=len(entries), scored=0)

    average = sum(scores) / len(scores)
    return ConservationSummary(
        gene=gene_id,
        orthologs=len(entries),
        scored=len(scores),
        average=average,
        highly_conserved=average > HIGHLY_CONSERVED_THRESHOLD,
        interpretation=interpret_conservation(average),
    )
