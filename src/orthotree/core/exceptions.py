"""
Custom exceptions with actionable guidance.

Provides specific error types for common failure scenarios,
each with helpful suggestions for resolution.
"""

from __future__ import annotations


class OrthotreeError(Exception):
    """Base exception for orthotree errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class InvalidTaxonListError(OrthotreeError):
    """Raised when the taxon list cannot be used to build a tree."""

    def __init__(self, reason: str = "Taxon list is empty"):
        super().__init__(
            message=reason,
            suggestion=(
                "Provide at least one taxon with a unique id. "
                "Check that the ortholog query or taxon file returned results."
            ),
        )


class AsymmetricOrNegativeDistanceError(OrthotreeError):
    """Raised when distance values are not a valid symmetric, non-negative matrix."""

    def __init__(self, details: str):
        super().__init__(
            message=f"Invalid distance matrix: {details}",
            suggestion=(
                "Distances must be finite, non-negative, symmetric "
                "(d(i,j) == d(j,i)) and zero on the diagonal."
            ),
        )
        self.details = details


class UnknownMethodError(OrthotreeError):
    """Raised when a tree construction method is not recognized."""

    def __init__(self, method: str, valid: list[str]):
        super().__init__(
            message=f"Unknown tree method: '{method}'",
            suggestion=f"Choose one of: {', '.join(valid)}",
        )
        self.method = method


class NewickParseError(OrthotreeError):
    """Raised when a Newick tree cannot be read into a binary tree."""

    def __init__(self, reason: str, source: str | None = None):
        where = f" ({source})" if source else ""
        super().__init__(
            message=f"Cannot read Newick tree{where}: {reason}",
            suggestion=(
                "Trees must be valid Newick terminated by ';' and strictly "
                "bifurcating (every internal node has exactly two children)."
            ),
        )


class MatrixFileError(OrthotreeError):
    """Raised when a taxon list or distance matrix file is malformed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Malformed input file '{path}': {reason}",
            suggestion=(
                "Taxon files need an 'id,symbol,species' header. Distance "
                "matrices need taxon labels in the first column and as the "
                "header row, in the same order."
            ),
        )
        self.path = path


class ConfigurationError(OrthotreeError):
    """Raised when configuration is invalid."""
