"""
Unit tests for the tree CLI commands.

Tests argument validation, input sources, output formats and error
handling for the build, compare and stats subcommands.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

from orthotree.cli.main import app
from orthotree.core.phylogeny.conservation import ConservationSummary
from orthotree.core.phylogeny.models import Taxon

UPGMA_NEWICK = "((Human:0,Mouse:0):0,(Zebrafish:0,Fly:0):0.75):2.625;"


class TestMainApp:
    """Tests for the top-level application."""

    def test_version(self, cli_runner):
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "orthotree version 0.1.0" in result.output

    def test_tree_help(self, cli_runner):
        result = cli_runner.invoke(app, ["tree", "--help"])
        assert result.exit_code == 0
        assert "build" in result.output
        assert "compare" in result.output


class TestBuildCommand:
    """Tests for 'tree build'."""

    def test_matrix_to_file(self, cli_runner, matrix_csv: Path, tmp_path: Path):
        """UPGMA tree from a matrix file is written as Newick."""
        output = tmp_path / "out" / "tree.nwk"
        result = cli_runner.invoke(
            app,
            ["tree", "build", "--method", "upgma", "--matrix", str(matrix_csv), "-o", str(output)],
        )
        assert result.exit_code == 0
        assert output.read_text() == UPGMA_NEWICK + "\n"
        assert "Tree built successfully" in result.output

    def test_matrix_to_stdout_quiet(self, cli_runner, matrix_csv: Path):
        """Quiet mode prints only the Newick string."""
        result = cli_runner.invoke(
            app, ["tree", "build", "-m", "upgma", "-d", str(matrix_csv), "--quiet"]
        )
        assert result.exit_code == 0
        assert result.output.strip() == UPGMA_NEWICK

    def test_taxa_file(self, cli_runner, taxa_csv: Path):
        result = cli_runner.invoke(app, ["tree", "build", "--taxa", str(taxa_csv), "-q"])
        assert result.exit_code == 0
        newick = result.output.strip()
        assert newick.endswith(";")
        for symbol in ("Human", "Mouse", "Zebrafish", "Fly"):
            assert symbol in newick

    def test_json_output(self, cli_runner, matrix_csv: Path, tmp_path: Path):
        output = tmp_path / "tree.json"
        result = cli_runner.invoke(
            app,
            ["tree", "build", "-m", "upgma", "-d", str(matrix_csv), "--json", "-o", str(output)],
        )
        assert result.exit_code == 0
        payload = json.loads(output.read_text())
        assert payload["method"] == "upgma"
        assert payload["taxa"] == 4
        assert payload["newick"] == UPGMA_NEWICK
        assert payload["statistics"]["leaves"] == 4
        assert payload["tree"]["id"] == "root"

    def test_method_from_config(self, cli_runner, matrix_csv: Path, tmp_path: Path):
        config = tmp_path / "config.yaml"
        config.write_text("phylogeny:\n  method: upgma\n  newick_precision: 1\n")
        result = cli_runner.invoke(
            app, ["tree", "build", "-d", str(matrix_csv), "-c", str(config), "-q"]
        )
        assert result.exit_code == 0
        assert result.output.strip() == "((Human:0,Mouse:0):0,(Zebrafish:0,Fly:0):0.8):2.6;"

    def test_gene_source(self, cli_runner, tmp_path: Path):
        """Orthologs fetched from the Alliance feed the tree."""
        taxa = (
            Taxon(id="HGNC:1101", symbol="BRCA2", species="Homo sapiens"),
            Taxon(id="MGI:109337", symbol="Brca2", species="Mus musculus"),
            Taxon(id="ZFIN:1", symbol="brca2", species="Danio rerio"),
        )
        output = tmp_path / "tree.nwk"
        with patch(
            "orthotree.clients.alliance.AllianceClient.get_orthologs",
            return_value=taxa,
        ) as mock_get:
            result = cli_runner.invoke(
                app,
                ["tree", "build", "--gene", "HGNC:1101", "-s", "mus", "-o", str(output)],
            )
        assert result.exit_code == 0
        mock_get.assert_called_once_with("HGNC:1101", ["mus"])
        assert output.read_text().count(":") == 5

    def test_requires_source(self, cli_runner):
        result = cli_runner.invoke(app, ["tree", "build"])
        assert result.exit_code == 1
        assert "required" in result.output

    def test_gene_with_matrix_rejected(self, cli_runner, matrix_csv: Path):
        result = cli_runner.invoke(
            app, ["tree", "build", "--gene", "HGNC:1", "--matrix", str(matrix_csv)]
        )
        assert result.exit_code == 1

    def test_unknown_method(self, cli_runner, matrix_csv: Path):
        result = cli_runner.invoke(
            app, ["tree", "build", "-m", "parsimony", "-d", str(matrix_csv)]
        )
        assert result.exit_code == 1
        assert "parsimony" in result.output

    def test_invalid_matrix(self, cli_runner, tmp_path: Path):
        path = tmp_path / "bad.csv"
        path.write_text("taxon,A,B\nA,0,1\nB,3,0\n")
        result = cli_runner.invoke(app, ["tree", "build", "-d", str(path)])
        assert result.exit_code == 1
        assert "Invalid distance matrix" in result.output

    def test_missing_matrix_file(self, cli_runner, tmp_path: Path):
        result = cli_runner.invoke(
            app, ["tree", "build", "-d", str(tmp_path / "missing.csv")]
        )
        assert result.exit_code != 0


class TestCompareCommand:
    """Tests for 'tree compare'."""

    def test_identical_trees_json(self, cli_runner, upgma_newick_file: Path):
        result = cli_runner.invoke(
            app,
            ["tree", "compare", str(upgma_newick_file), str(upgma_newick_file), "--json"],
        )
        assert result.exit_code == 0
        assert json.loads(result.output) == {"robinson_foulds": 0, "similarity": 1.0}

    def test_different_trees_table(self, cli_runner, tmp_path: Path):
        a = tmp_path / "a.nwk"
        b = tmp_path / "b.nwk"
        a.write_text("((A,B),(C,D));")
        b.write_text("((A,C),(B,D));")
        result = cli_runner.invoke(app, ["tree", "compare", str(a), str(b)])
        assert result.exit_code == 0
        assert "Robinson-Foulds" in result.output
        assert "0.2000" in result.output

    def test_invalid_newick(self, cli_runner, tmp_path: Path, upgma_newick_file: Path):
        bad = tmp_path / "bad.nwk"
        bad.write_text("(A,B,C);")
        result = cli_runner.invoke(app, ["tree", "compare", str(bad), str(upgma_newick_file)])
        assert result.exit_code == 1


class TestStatsCommand:
    """Tests for 'tree stats'."""

    def test_stats_json(self, cli_runner, upgma_newick_file: Path):
        result = cli_runner.invoke(app, ["tree", "stats", str(upgma_newick_file), "--json"])
        assert result.exit_code == 0
        stats = json.loads(result.output)
        assert stats["leaves"] == 4
        assert stats["max_depth"] == 2
        assert stats["total_branch_length"] == 3.375
        assert stats["average_branch_length"] == 0.84375

    def test_stats_table(self, cli_runner, upgma_newick_file: Path):
        result = cli_runner.invoke(app, ["tree", "stats", str(upgma_newick_file)])
        assert result.exit_code == 0
        assert "Tree Statistics" in result.output
        assert "3.3750" in result.output


class TestConservationCommand:
    """Tests for 'tree conservation'."""

    SUMMARY = ConservationSummary(
        gene="HGNC:1101",
        orthologs=3,
        scored=2,
        average=0.75,
        highly_conserved=True,
        interpretation="Highly conserved: Important for core biological processes",
    )

    def test_json(self, cli_runner):
        with patch(
            "orthotree.clients.alliance.AllianceClient.get_conservation",
            return_value=self.SUMMARY,
        ) as mock_get:
            result = cli_runner.invoke(
                app,
                ["tree", "conservation", "--gene", "HGNC:1101", "-s", "mus", "--json", "-q"],
            )
        assert result.exit_code == 0
        mock_get.assert_called_once_with("HGNC:1101", ["mus"])
        payload = json.loads(result.output)
        assert payload["average"] == 0.75
        assert payload["highly_conserved"] is True

    def test_table(self, cli_runner):
        with patch(
            "orthotree.clients.alliance.AllianceClient.get_conservation",
            return_value=self.SUMMARY,
        ):
            result = cli_runner.invoke(app, ["tree", "conservation", "-g", "HGNC:1101", "-q"])
        assert result.exit_code == 0
        assert "0.750" in result.output
        assert "Highly conserved" in result.output

    def test_no_scores(self, cli_runner):
        summary = ConservationSummary(gene="HGNC:1101", orthologs=2, scored=0)
        with patch(
            "orthotree.clients.alliance.AllianceClient.get_conservation",
            return_value=summary,
        ):
            result = cli_runner.invoke(app, ["tree", "conservation", "-g", "HGNC:1101", "-q"])
        assert result.exit_code == 0
        assert "n/a" in result.output

    def test_api_error(self, cli_runner):
        from orthotree.clients.alliance import AllianceAPIError

        with patch(
            "orthotree.clients.alliance.AllianceClient.get_conservation",
            side_effect=AllianceAPIError("Alliance API request failed: 404", status_code=404),
        ):
            result = cli_runner.invoke(app, ["tree", "conservation", "-g", "HGNC:0"])
        assert result.exit_code == 1
        assert "404" in result.output

    def test_gene_required(self, cli_runner):
        result = cli_runner.invoke(app, ["tree", "conservation"])
        assert result.exit_code != 0
