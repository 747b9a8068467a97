"""
Pydantic data models for orthotree.

Provides type-safe configuration models for tree construction and the
Alliance API client.
"""

from orthotree.models.config import AllianceConfig, OrthotreeConfig, PhylogenyConfig

__all__ = [
    "AllianceConfig",
    "OrthotreeConfig",
    "PhylogenyConfig",
]
