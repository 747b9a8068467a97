"""
Pydantic configuration models for orthotree.

These models define settings for tree construction (distance strategy,
Newick output) and for the Alliance of Genome Resources client.
Configuration can be loaded from YAML files or built from CLI arguments.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from orthotree.core.constants import (
    ALLIANCE_API_BASE,
    DEFAULT_DIVERGENCE,
    DIVERGENCE_SCALE,
    DIVERGENCE_TIMES,
    NEWICK_PRECISION,
    SPECIES_COLORS,
)
from orthotree.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class PhylogenyConfig(BaseModel):
    """
    Configuration for distance computation and tree output.

    Divergence settings drive the default distance strategy: each species
    maps to a divergence time from human (million years) and the distance
    between two genes is ``|t1 - t2| / divergence_scale``. Species absent
    from the table use ``default_divergence``.
    """

    method: Literal["neighbor_joining", "upgma"] = Field(
        default="neighbor_joining",
        description="Tree construction method",
    )
    newick_precision: int = Field(
        default=NEWICK_PRECISION,
        ge=0,
        le=15,
        description="Decimal places for branch lengths in Newick output",
    )
    newick_label: Literal["symbol", "id", "symbol_species"] = Field(
        default="symbol",
        description="Leaf label style in Newick output",
    )
    divergence_scale: float = Field(
        default=DIVERGENCE_SCALE,
        gt=0,
        description="Divisor turning divergence-time differences into distances",
    )
    default_divergence: float = Field(
        default=DEFAULT_DIVERGENCE,
        ge=0,
        description="Divergence time assumed for species missing from the table",
    )
    divergence_times: dict[str, float] = Field(
        default_factory=lambda: dict(DIVERGENCE_TIMES),
        description="Species to divergence time from human (My)",
    )
    species_colors: dict[str, str] = Field(
        default_factory=lambda: dict(SPECIES_COLORS),
        description="Species to hex display color",
    )

    @field_validator("divergence_times")
    @classmethod
    def validate_divergence_times(cls, value: dict[str, float]) -> dict[str, float]:
        """Divergence times must be non-negative."""
        negative = {species: t for species, t in value.items() if t < 0}
        if negative:
            msg = f"Divergence times must be non-negative: {negative}"
            raise ValueError(msg)
        return value

    model_config = {"frozen": True}


class AllianceConfig(BaseModel):
    """Settings for the Alliance of Genome Resources API client."""

    api_base: str = Field(
        default=ALLIANCE_API_BASE,
        description="Base URL of the Alliance REST API",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout in seconds",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        description="Maximum retry attempts for transient failures",
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0,
        description="Initial delay between retries in seconds",
    )
    retry_backoff: float = Field(
        default=2.0,
        ge=1.0,
        description="Exponential backoff multiplier for retries",
    )

    model_config = {"frozen": True}


class OrthotreeConfig(BaseModel):
    """Top-level configuration bundling all sections."""

    phylogeny: PhylogenyConfig = Field(default_factory=PhylogenyConfig)
    alliance: AllianceConfig = Field(default_factory=AllianceConfig)

    model_config = {"frozen": True}

    @classmethod
    def from_yaml(cls, path: Path) -> OrthotreeConfig:
        """
        Load configuration from a YAML file.

        Missing sections and keys fall back to defaults. Unknown top-level
        sections are ignored with a warning.

        Args:
            path: Path to YAML configuration file.

        Returns:
            OrthotreeConfig populated from YAML values merged with defaults.

        Raises:
            FileNotFoundError: If YAML file does not exist.
            ConfigurationError: If the YAML document is not a mapping.
            pydantic.ValidationError: If values are out of range.
        """
        import yaml

        raw = yaml.safe_load(path.read_text())
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigurationError(
                f"YAML config must be a mapping, got {type(raw).__name__}",
                suggestion="Use top-level 'phylogeny:' and 'alliance:' sections.",
            )

        known = {"phylogeny", "alliance"}
        unknown = set(raw) - known
        if unknown:
            logger.warning(f"Ignoring unknown config sections: {', '.join(sorted(unknown))}")

        kwargs: dict[str, Any] = {}
        for section in known:
            value = raw.get(section)
            if value is None:
                continue
            if not isinstance(value, dict):
                raise ConfigurationError(
                    f"Config section '{section}' must be a mapping, "
                    f"got {type(value).__name__}"
                )
            kwargs[section] = value
        return cls(**kwargs)

    def to_yaml(self, path: Path) -> None:
        """
        Write configuration to a YAML file.

        Args:
            path: Output file path.
        """
        path.write_text(self.to_yaml_str())

    def to_yaml_str(self) -> str:
        """Render configuration as a YAML string."""
        import yaml

        return yaml.dump(self.model_dump(), default_flow_style=False, sort_keys=False)
