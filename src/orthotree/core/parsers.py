"""
Parsers for taxon lists and precomputed distance matrices.

Both formats are delimited text (CSV, or TSV by extension, optionally
gzipped) read with Polars.
"""

from __future__ import annotations

import logging
from pathlib import Path

import polars as pl

from orthotree.core.exceptions import AsymmetricOrNegativeDistanceError, MatrixFileError
from orthotree.core.phylogeny.distance import DistanceMatrix
from orthotree.core.phylogeny.models import Taxon

logger = logging.getLogger(__name__)

TAXON_REQUIRED_COLUMNS = ("id", "symbol", "species")


def _separator(path: Path) -> str:
    return "\t" if str(path).endswith((".tsv", ".tsv.gz")) else ","


class TaxonListParser:
    """
    Parser for ordered taxon lists.

    Expected format:
    - CSV or TSV with a header row
    - Required columns: id, symbol, species
    - Optional column: name
    Row order is preserved and becomes the leaf order of the tree.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        if not self.path.exists():
            msg = f"Taxon file not found: {self.path}"
            raise FileNotFoundError(msg)

    def parse(self) -> list[Taxon]:
        """
        Parse the file into taxa.

        Returns:
            Taxa in file order.

        Raises:
            MatrixFileError: If required columns are missing or values are empty.
        """
        try:
            df = pl.read_csv(
                self.path,
                separator=_separator(self.path),
                has_header=True,
                infer_schema_length=0,
            )
        except pl.exceptions.PolarsError as e:
            raise MatrixFileError(str(self.path), str(e)) from e

        missing = [c for c in TAXON_REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise MatrixFileError(
                str(self.path), f"missing required columns: {', '.join(missing)}"
            )

        nulls = df.select(TAXON_REQUIRED_COLUMNS).null_count().sum_horizontal()[0]
        if nulls > 0:
            raise MatrixFileError(str(self.path), "empty id, symbol or species values")

        has_name = "name" in df.columns
        taxa = [
            Taxon(
                id=row["id"],
                symbol=row["symbol"],
                species=row["species"],
                name=row["name"] if has_name else None,
            )
            for row in df.iter_rows(named=True)
        ]
        logger.debug(f"Parsed {len(taxa)} taxa from {self.path}")
        return taxa


class DistanceMatrixParser:
    """
    Parser for precomputed pairwise distance matrices.

    Expected format:
    - CSV or TSV with taxon labels as first column and header row
    - Row labels in the same order as the column headers
    - Symmetric, non-negative values with a zero diagonal

    When a taxon list is supplied, matrix labels are matched against taxon
    ids; otherwise each label becomes a taxon with the label as id and
    symbol. Either way the matrix row order is the leaf order.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        if not self.path.exists():
            msg = f"Distance matrix file not found: {self.path}"
            raise FileNotFoundError(msg)

    def parse(self, taxa: list[Taxon] | None = None) -> DistanceMatrix:
        """
        Parse the file into a validated DistanceMatrix.

        Args:
            taxa: Optional taxa whose ids label the matrix.

        Returns:
            Read-only DistanceMatrix.

        Raises:
            MatrixFileError: If the file layout is wrong.
            AsymmetricOrNegativeDistanceError: If the values are invalid.
        """
        try:
            df = pl.read_csv(self.path, separator=_separator(self.path), has_header=True)
        except pl.exceptions.PolarsError as e:
            raise MatrixFileError(str(self.path), str(e)) from e

        if df.is_empty():
            raise MatrixFileError(str(self.path), "matrix is empty")

        label_col = df.columns[0]
        value_cols = df.columns[1:]
        row_labels = [str(v) for v in df.get_column(label_col).to_list()]

        if len(row_labels) != len(value_cols):
            raise MatrixFileError(
                str(self.path),
                f"matrix is not square: {len(row_labels)} rows, "
                f"{len(value_cols)} value columns",
            )
        if row_labels != list(value_cols):
            raise MatrixFileError(
                str(self.path), "row labels do not match column headers in order"
            )

        try:
            values = df.select(
                [pl.col(c).cast(pl.Float64, strict=True) for c in value_cols]
            ).to_numpy()
        except pl.exceptions.PolarsError as e:
            raise MatrixFileError(str(self.path), f"non-numeric values: {e}") from e

        if taxa is None:
            taxa = [Taxon(id=label, symbol=label, species="") for label in row_labels]
        else:
            by_id = {t.id: t for t in taxa}
            unknown = [label for label in row_labels if label not in by_id]
            if unknown or len(taxa) != len(row_labels):
                raise MatrixFileError(
                    str(self.path),
                    f"matrix labels do not match taxon ids (unmatched: {unknown[:5]})",
                )
            taxa = [by_id[label] for label in row_labels]

        try:
            return DistanceMatrix.from_values(taxa, values)
        except AsymmetricOrNegativeDistanceError:
            logger.error(f"Distance matrix {self.path} failed validation")
            raise
