"""
Main CLI entry point for orthotree.

Provides subcommands:
- tree build: Build a phylogenetic tree from orthologs, taxa or a matrix
- tree compare: Robinson-Foulds comparison of two Newick trees
- tree stats: Summary statistics of a Newick tree
- tree conservation: Average ortholog conservation of a gene
"""

from __future__ import annotations

import typer
from rich import print as rprint
from rich.console import Console

from orthotree import __version__

app = typer.Typer(
    name="orthotree",
    help="Distance-based phylogenetic trees for orthologous gene families",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        rprint(f"orthotree version {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Orthotree: distance-based phylogenetic trees for orthologous gene families.

    Builds neighbor-joining or UPGMA trees from ortholog sets, writes Newick,
    and compares trees by their shared clades.
    """


# Import subcommands
from orthotree.cli import tree

# Register subcommands
app.add_typer(tree.app, name="tree")


if __name__ == "__main__":
    app()
