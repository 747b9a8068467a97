"""
CLI commands for orthotree.

Provides command-line interface for building, comparing and summarizing
phylogenetic trees.
"""

__all__ = ["main", "tree"]
