"""
Constants used throughout the orthotree package.

Centralizes species reference data, default values, and formatting
constants to improve maintainability and consistency.
"""

from __future__ import annotations

# =============================================================================
# Species Reference Data
#
# Approximate divergence times from Homo sapiens in million years (My),
# used by the default divergence-time distance strategy.
# =============================================================================

DIVERGENCE_TIMES: dict[str, float] = {
    "Homo sapiens": 0.0,
    "Mus musculus": 90.0,
    "Rattus norvegicus": 90.0,
    "Danio rerio": 450.0,
    "Drosophila melanogaster": 600.0,
    "Caenorhabditis elegans": 600.0,
    "Saccharomyces cerevisiae": 1000.0,
    "Xenopus tropicalis": 360.0,
}

# Divergence assigned to species missing from the table
DEFAULT_DIVERGENCE = 500.0

# Divergence difference (My) is divided by this to give a tree distance
DIVERGENCE_SCALE = 100.0

# =============================================================================
# Display Constants
# =============================================================================

SPECIES_COLORS: dict[str, str] = {
    "Homo sapiens": "#FF6B6B",
    "Mus musculus": "#4ECDC4",
    "Danio rerio": "#45B7D1",
    "Drosophila melanogaster": "#96CEB4",
    "Caenorhabditis elegans": "#FECA57",
    "Saccharomyces cerevisiae": "#DDA0DD",
}

DEFAULT_SPECIES_COLOR = "#999999"

# Layout origin and spacing for visualization-ready trees
LAYOUT_ORIGIN_X = 300.0
LAYOUT_ORIGIN_Y = 50.0
LAYOUT_X_SPREAD = 50.0
LAYOUT_Y_STEP = 30.0

# =============================================================================
# Newick Formatting
# =============================================================================

# Decimal places used for branch lengths and support values
NEWICK_PRECISION = 6

# Characters with structural meaning in Newick labels
NEWICK_RESERVED_CHARS = "(),:;[]'"

# =============================================================================
# Numerical Tolerances
# =============================================================================

# Absolute tolerance for symmetry and ultrametric checks
DISTANCE_TOLERANCE = 1e-9

# =============================================================================
# Alliance of Genome Resources API
# =============================================================================

ALLIANCE_API_BASE = "https://www.alliancegenome.org/api"
