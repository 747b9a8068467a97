"""Tests for ortholog conservation summaries."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from orthotree.core.phylogeny.conservation import (
    ConservationSummary,
    OrthologScore,
    conservation_score,
    interpret_conservation,
)


def _score(i: int, score: float | None) -> OrthologScore:
    return OrthologScore(id=f"G:{i}", symbol=f"g{i}", species="Mus musculus", score=score)


class TestInterpretConservation:
    """Tests for interpret_conservation bands."""

    @pytest.mark.parametrize(
        ("score", "prefix"),
        [
            (1.0, "Ultra-conserved"),
            (0.91, "Ultra-conserved"),
            (0.9, "Highly conserved"),
            (0.71, "Highly conserved"),
            (0.7, "Moderately conserved"),
            (0.5, "Weakly conserved"),
            (0.3, "Poorly conserved"),
            (0.0, "Poorly conserved"),
        ],
    )
    def test_bands(self, score: float, prefix: str) -> None:
        assert interpret_conservation(score).startswith(prefix)

    def test_full_wording(self) -> None:
        assert interpret_conservation(0.95) == (
            "Ultra-conserved: Essential for basic cellular function"
        )
        assert interpret_conservation(0.1) == (
            "Poorly conserved: Significant evolutionary divergence"
        )


class TestConservationScore:
    """Tests for conservation_score."""

    def test_average_of_scores(self) -> None:
        summary = conservation_score("HGNC:1", [_score(1, 1.0), _score(2, 0.5)])
        assert summary.gene == "HGNC:1"
        assert summary.average == pytest.approx(0.75)
        assert summary.highly_conserved is True
        assert summary.interpretation == (
            "Highly conserved: Important for core biological processes"
        )

    def test_threshold_is_strict(self) -> None:
        summary = conservation_score("HGNC:1", [_score(1, 0.7)])
        assert summary.highly_conserved is False
        assert summary.interpretation.startswith("Moderately")

    def test_unscored_orthologs_skipped(self) -> None:
        summary = conservation_score(
            "HGNC:1", [_score(1, 1.0), _score(2, None), _score(3, 0.0)]
        )
        assert (summary.orthologs, summary.scored) == (3, 2)
        assert summary.average == pytest.approx(0.5)

    def test_deterministic(self) -> None:
        orthologs = [_score(1, None), _score(2, None)]
        assert conservation_score("HGNC:1", orthologs) == conservation_score(
            "HGNC:1", orthologs
        )

    def test_no_scores(self) -> None:
        summary = conservation_score("HGNC:1", [_score(1, None)])
        assert summary.scored == 0
        assert summary.average is None
        assert summary.highly_conserved is False
        assert summary.interpretation is None

    def test_no_orthologs(self) -> None:
        summary = conservation_score("HGNC:1", [])
        assert summary.orthologs == 0
        assert summary.average is None

    def test_accepts_generator(self) -> None:
        summary = conservation_score("HGNC:1", (_score(i, 1.0) for i in range(3)))
        assert summary.scored == 3


class TestModels:
    """Tests for score validation."""

    @pytest.mark.parametrize("value", [-0.1, 1.5])
    def test_score_out_of_range(self, value: float) -> None:
        with pytest.raises(ValueError, match="between 0 and 1"):
            _score(1, value)

    def test_summary_frozen(self) -> None:
        summary = ConservationSummary(gene="HGNC:1", orthologs=0, scored=0)
        with pytest.raises(ValidationError):
            summary.gene = "other"  # type: ignore[misc]
