"""Tests for custom exception messages and suggestions."""

from __future__ import annotations

import pytest

from orthotree.clients.alliance import AllianceAPIError
from orthotree.core.exceptions import (
    AsymmetricOrNegativeDistanceError,
    ConfigurationError,
    InvalidTaxonListError,
    MatrixFileError,
    NewickParseError,
    OrthotreeError,
    UnknownMethodError,
)


class TestOrthotreeError:
    """Tests for the base exception."""

    def test_message_only(self) -> None:
        error = OrthotreeError("Something failed")
        assert str(error) == "Something failed"
        assert error.suggestion is None

    def test_with_suggestion(self) -> None:
        error = OrthotreeError("Something failed", suggestion="Try again")
        assert str(error) == "Something failed\n\nSuggestion: Try again"
        assert error.message == "Something failed"


class TestSpecificErrors:
    """Tests for the specific error types."""

    @pytest.mark.parametrize(
        "error",
        [
            InvalidTaxonListError(),
            AsymmetricOrNegativeDistanceError("d(a, b) != d(b, a)"),
            UnknownMethodError("ml", ["neighbor_joining", "upgma"]),
            NewickParseError("unexpected token"),
            MatrixFileError("m.csv", "empty"),
            ConfigurationError("bad"),
            AllianceAPIError("failed"),
        ],
    )
    def test_all_are_orthotree_errors(self, error: Exception) -> None:
        assert isinstance(error, OrthotreeError)

    def test_invalid_taxon_list_default(self) -> None:
        error = InvalidTaxonListError()
        assert error.message == "Taxon list is empty"
        assert "at least one taxon" in error.suggestion

    def test_distance_error_details(self) -> None:
        error = AsymmetricOrNegativeDistanceError("negative distance -1")
        assert error.details == "negative distance -1"
        assert error.message == "Invalid distance matrix: negative distance -1"

    def test_unknown_method_lists_choices(self) -> None:
        error = UnknownMethodError("ml", ["neighbor_joining", "upgma"])
        assert error.method == "ml"
        assert error.suggestion == "Choose one of: neighbor_joining, upgma"

    def test_newick_error_source(self) -> None:
        error = NewickParseError("bad", source="a.nwk")
        assert error.message == "Cannot read Newick tree (a.nwk): bad"

    def test_matrix_file_error_path(self) -> None:
        error = MatrixFileError("m.csv", "empty")
        assert error.path == "m.csv"
        assert "m.csv" in error.message


class TestAllianceAPIError:
    """Tests for status-aware Alliance error suggestions."""

    def test_no_status(self) -> None:
        assert "internet connection" in str(AllianceAPIError("failed"))

    def test_not_found(self) -> None:
        error = AllianceAPIError("failed", status_code=404)
        assert error.status_code == 404
        assert "may not exist" in str(error)

    def test_rate_limited(self) -> None:
        assert "Rate limited" in str(AllianceAPIError("failed", status_code=429))

    def test_server_error(self) -> None:
        assert "server error" in str(AllianceAPIError("failed", status_code=503))
