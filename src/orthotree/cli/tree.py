"""
Tree command for building and comparing phylogenetic trees.

Provides subcommands:
- build: Build a tree from Alliance orthologs, a taxon list, or a distance matrix
- compare: Robinson-Foulds distance and similarity between two Newick trees
- stats: Summary statistics of a Newick tree
- conservation: Average ortholog conservation of a gene
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from orthotree.cli.utils import QuietConsole, fail, load_config, spinner_progress
from orthotree.core.exceptions import OrthotreeError
from orthotree.core.phylogeny.clustering import TreeMethod
from orthotree.core.phylogeny.models import Tree, TreeResult

app = typer.Typer(
    name="tree",
    help="Build, compare and summarize phylogenetic trees",
    no_args_is_help=True,
)

# Status output goes to stderr so Newick/JSON on stdout stays clean
console = Console(stderr=True)


def _read_tree(path: Path) -> Tree:
    from orthotree.core.phylogeny.newick import tree_from_newick

    return tree_from_newick(path.read_text(), source=str(path))


def _result_payload(result: TreeResult) -> dict[str, Any]:
    from orthotree.core.phylogeny.layout import to_layout

    return {
        "method": result.method.value,
        "taxa": len(result.taxa),
        "newick": result.newick,
        "statistics": result.statistics.model_dump(),
        "tree": to_layout(result.tree),
    }


@app.command(name="build")
def build(
    method: str | None = typer.Option(
        None,
        "--method",
        "-m",
        help="Tree building method: neighbor_joining (nj) or upgma [default: from config]",
    ),
    gene: str | None = typer.Option(
        None,
        "--gene",
        "-g",
        help="Gene identifier to fetch orthologs for from the Alliance (e.g., HGNC:1100)",
    ),
    species: list[str] | None = typer.Option(
        None,
        "--species",
        "-s",
        help="Keep orthologs from species matching this text (repeatable, --gene only)",
    ),
    taxa_path: Path | None = typer.Option(
        None,
        "--taxa",
        "-t",
        help="Taxon list CSV/TSV with id, symbol, species columns",
        exists=True,
        dir_okay=False,
    ),
    matrix_path: Path | None = typer.Option(
        None,
        "--matrix",
        "-d",
        help="Precomputed distance matrix CSV/TSV (labels in first column and header)",
        exists=True,
        dir_okay=False,
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file",
        exists=True,
        dir_okay=False,
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (default: standard output)",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Write JSON with Newick, statistics and layout instead of plain Newick",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress progress output",
    ),
) -> None:
    """
    Build a phylogenetic tree.

    Taxa come from one of three sources:

    - --gene: query gene and its orthologs from the Alliance of Genome Resources

    - --taxa: a taxon list file (distances from species divergence times)

    - --matrix: a precomputed distance matrix (optionally labelled by --taxa)

    Examples:

        # NJ tree for human BRCA2 orthologs
        orthotree tree build --gene HGNC:1101 --output brca2.nwk

        # UPGMA tree from a distance matrix
        orthotree tree build --method upgma --matrix distances.csv -o tree.nwk
    """
    out = QuietConsole(console, quiet=quiet)
    config = load_config(config_path, console)

    try:
        tree_method = TreeMethod.parse(method or config.phylogeny.method)
    except OrthotreeError as e:
        raise fail(console, e) from None

    if gene is not None and (taxa_path is not None or matrix_path is not None):
        console.print("[red]Error: --gene cannot be combined with --taxa or --matrix[/red]")
        raise typer.Exit(code=1) from None
    if gene is None and taxa_path is None and matrix_path is None:
        console.print("[red]Error: one of --gene, --taxa or --matrix is required[/red]")
        raise typer.Exit(code=1) from None
    if species and gene is None:
        out.print("[yellow]Warning: --species only applies with --gene; ignoring[/yellow]")

    out.print("\n[bold blue]Orthotree Tree Builder[/bold blue]\n")
    out.print(f"[bold]Method:[/bold] {tree_method.value}")

    from orthotree.core.parsers import DistanceMatrixParser, TaxonListParser
    from orthotree.core.phylogeny.tree_builder import build_tree, build_tree_from_matrix

    try:
        if gene is not None:
            from orthotree.clients.alliance import AllianceClient

            out.print(f"[bold]Gene:[/bold] {gene}")
            with spinner_progress(f"Fetching orthologs for {gene}...", console, quiet):
                with AllianceClient.from_config(config.alliance) as client:
                    taxa = client.get_orthologs(gene, species)
            out.print(f"[bold]Taxa:[/bold] {len(taxa)}")
            result = build_tree(taxa, None, tree_method, config=config.phylogeny)

        elif matrix_path is not None:
            taxa = TaxonListParser(taxa_path).parse() if taxa_path is not None else None
            matrix = DistanceMatrixParser(matrix_path).parse(taxa)
            out.print(f"[bold]Distance matrix:[/bold] {matrix_path}")
            out.print(f"[bold]Taxa:[/bold] {len(matrix)}")
            result = build_tree_from_matrix(matrix, tree_method, config=config.phylogeny)

        else:
            taxa = TaxonListParser(taxa_path).parse()
            out.print(f"[bold]Taxon list:[/bold] {taxa_path}")
            out.print(f"[bold]Taxa:[/bold] {len(taxa)}")
            result = build_tree(taxa, None, tree_method, config=config.phylogeny)

    except OrthotreeError as e:
        raise fail(console, e) from None

    if verbose:
        stats = result.statistics
        out.print(
            f"[dim]Leaves: {stats.leaves}, max depth: {stats.max_depth}, "
            f"total branch length: {stats.total_branch_length:.4f}[/dim]"
        )

    text = json.dumps(_result_payload(result), indent=2) if as_json else result.newick

    if output is None:
        typer.echo(text)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n")

    out.print("\n[bold green]Tree built successfully![/bold green]")
    out.print(f"[bold]Output:[/bold] {output}")
    out.print()


@app.command(name="compare")
def compare(
    tree_a: Path = typer.Argument(..., help="First Newick tree", exists=True, dir_okay=False),
    tree_b: Path = typer.Argument(..., help="Second Newick tree", exists=True, dir_okay=False),
    as_json: bool = typer.Option(False, "--json", "-j", help="Print JSON instead of a table"),
) -> None:
    """
    Compare two trees by their clades (Robinson-Foulds distance).

    Trees must be bifurcating; tips are matched by name.
    """
    from orthotree.core.phylogeny.comparison import compare_trees

    try:
        comparison = compare_trees(_read_tree(tree_a), _read_tree(tree_b))
    except OrthotreeError as e:
        raise fail(console, e) from None

    if as_json:
        typer.echo(json.dumps(comparison.model_dump()))
        return

    table = Table(title="Tree Comparison", show_header=True)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right", style="magenta")
    table.add_row("Robinson-Foulds distance", str(comparison.robinson_foulds))
    table.add_row("Similarity", f"{comparison.similarity:.4f}")
    Console().print(table)


@app.command(name="stats")
def stats(
    tree_path: Path = typer.Argument(..., help="Newick tree", exists=True, dir_okay=False),
    as_json: bool = typer.Option(False, "--json", "-j", help="Print JSON instead of a table"),
) -> None:
    """Print summary statistics of a Newick tree."""
    from orthotree.core.phylogeny.statistics import tree_statistics

    try:
        statistics = tree_statistics(_read_tree(tree_path))
    except OrthotreeError as e:
        raise fail(console, e) from None

    if as_json:
        typer.echo(json.dumps(statistics.model_dump()))
        return

    table = Table(title="Tree Statistics", show_header=True)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right", style="magenta")
    table.add_row("Leaves", str(statistics.leaves))
    table.add_row("Maximum depth", str(statistics.max_depth))
    table.add_row("Total branch length", f"{statistics.total_branch_length:.4f}")
    table.add_row("Average branch length", f"{statistics.average_branch_length:.4f}")
    Console().print(table)


@app.command(name="conservation")
def conservation(
    gene: str = typer.Option(
        ...,
        "--gene",
        "-g",
        help="Gene identifier to score across its orthologs (e.g., HGNC:1100)",
    ),
    species: list[str] | None = typer.Option(
        None,
        "--species",
        "-s",
        help="Only score orthologs from species matching this text (repeatable)",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file",
        exists=True,
        dir_okay=False,
    ),
    as_json: bool = typer.Option(False, "--json", "-j", help="Print JSON instead of a table"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress progress output"),
) -> None:
    """
    Average ortholog conservation of a gene, with its interpretation.

    Orthologs are scored from the Alliance best-score flags; orthologs
    without flags are counted but not averaged.

    Examples:

        orthotree tree conservation --gene HGNC:1101 -s mus -s danio
    """
    from orthotree.clients.alliance import AllianceClient

    config = load_config(config_path, console)

    try:
        with spinner_progress(f"Fetching orthologs for {gene}...", console, quiet):
            with AllianceClient.from_config(config.alliance) as client:
                summary = client.get_conservation(gene, species)
    except OrthotreeError as e:
        raise fail(console, e) from None

    if as_json:
        typer.echo(json.dumps(summary.model_dump()))
        return

    table = Table(title=f"Conservation of {gene}", show_header=True)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", style="magenta")
    table.add_row("Orthologs", str(summary.orthologs))
    table.add_row("Scored orthologs", str(summary.scored))
    if summary.average is None:
        table.add_row("Average conservation", "n/a")
    else:
        table.add_row("Average conservation", f"{summary.average:.3f}")
        table.add_row("Highly conserved", "yes" if summary.highly_conserved else "no")
        table.add_row("Interpretation", summary.interpretation or "")
    Console().print(table)
