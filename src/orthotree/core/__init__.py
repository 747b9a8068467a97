"""
Core algorithms for orthotree.

The phylogeny subpackage holds the tree construction engine; parsers read
taxon lists and distance matrices from disk.
"""

from orthotree.core.exceptions import OrthotreeError

__all__ = [
    "OrthotreeError",
]
