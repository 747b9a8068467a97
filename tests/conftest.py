"""
Shared pytest fixtures for orthotree tests.

Provides reusable taxa, distance matrices and tree files for unit and
CLI testing.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest

from orthotree.core.phylogeny.distance import DistanceMatrix
from orthotree.core.phylogeny.models import Taxon


# =============================================================================
# Taxa Fixtures
# =============================================================================


@pytest.fixture
def four_taxa() -> list[Taxon]:
    """Human, mouse, zebrafish and fly orthologs, in that order."""
    return [
        Taxon(id="HGNC:1", symbol="Human", species="Homo sapiens"),
        Taxon(id="MGI:2", symbol="Mouse", species="Mus musculus"),
        Taxon(id="ZFIN:3", symbol="Zebrafish", species="Danio rerio"),
        Taxon(id="FB:4", symbol="Fly", species="Drosophila melanogaster"),
    ]


@pytest.fixture
def scenario_matrix(four_taxa: list[Taxon]) -> DistanceMatrix:
    """Human/Mouse identical, Zebrafish/Fly closest among the rest."""
    return DistanceMatrix.from_values(
        four_taxa,
        [
            [0.0, 0.0, 4.5, 6.0],
            [0.0, 0.0, 4.5, 6.0],
            [4.5, 4.5, 0.0, 1.5],
            [6.0, 6.0, 1.5, 0.0],
        ],
    )


@pytest.fixture
def additive_matrix() -> DistanceMatrix:
    """Five-taxon additive matrix with a known neighbor-joining tree."""
    taxa = [Taxon(id=name, symbol=name, species="") for name in "abcde"]
    return DistanceMatrix.from_values(
        taxa,
        [
            [0, 5, 9, 9, 8],
            [5, 0, 10, 10, 9],
            [9, 10, 0, 8, 7],
            [9, 10, 8, 0, 3],
            [8, 9, 7, 3, 0],
        ],
    )


@pytest.fixture
def random_matrix() -> Callable[[int, int], DistanceMatrix]:
    """Factory for random symmetric, non-negative matrices of size n."""

    def make(n: int, seed: int = 0) -> DistanceMatrix:
        rng = np.random.default_rng(seed)
        values = rng.uniform(0.1, 10.0, size=(n, n))
        values = (values + values.T) / 2
        np.fill_diagonal(values, 0.0)
        taxa = [Taxon(id=f"T{i}", symbol=f"T{i}", species="") for i in range(n)]
        return DistanceMatrix.from_values(taxa, values)

    return make


# =============================================================================
# File Fixtures
# =============================================================================


@pytest.fixture
def taxa_csv(tmp_path: Path) -> Path:
    """Taxon list CSV for the four-species set."""
    path = tmp_path / "taxa.csv"
    path.write_text(
        "id,symbol,species,name\n"
        "HGNC:1,Human,Homo sapiens,human gene\n"
        "MGI:2,Mouse,Mus musculus,mouse gene\n"
        "ZFIN:3,Zebrafish,Danio rerio,fish gene\n"
        "FB:4,Fly,Drosophila melanogaster,fly gene\n"
    )
    return path


@pytest.fixture
def matrix_csv(tmp_path: Path) -> Path:
    """Distance matrix CSV matching scenario_matrix, labelled by symbol."""
    path = tmp_path / "distances.csv"
    path.write_text(
        "taxon,Human,Mouse,Zebrafish,Fly\n"
        "Human,0,0,4.5,6\n"
        "Mouse,0,0,4.5,6\n"
        "Zebrafish,4.5,4.5,0,1.5\n"
        "Fly,6,6,1.5,0\n"
    )
    return path


@pytest.fixture
def upgma_newick_file(tmp_path: Path) -> Path:
    """Newick file holding the UPGMA tree of scenario_matrix."""
    path = tmp_path / "upgma.nwk"
    path.write_text("((Human:0,Mouse:0):0,(Zebrafish:0,Fly:0):0.75):2.625;\n")
    return path


# =============================================================================
# CLI Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Typer CLI runner for testing commands."""
    from typer.testing import CliRunner

    return CliRunner()
