"""Application constants.

Centralized location for the fixed numbers of the balancing method and
the labels used by the result views.
"""

from decimal import Decimal

# ============================================================================
# Proportion Budget (parts out of 100)
# ============================================================================

TOTAL_PARTS = Decimal("100")
SLACK_SPACE_PARTS = Decimal("10")
FIXED_INGREDIENT_PARTS = Decimal("10")

# Nutrient values are percentages of one unit of ingredient
HUNDRED_PERCENT = Decimal("100")

# ============================================================================
# Supplement Thresholds
# ============================================================================

# Deficits at or below these values do not trigger a supplement
MIN_NUTRIENT_DEFICIT = Decimal("0.001")
MIN_ENERGY_DEFICIT = Decimal("1")
MIN_FILLER_PARTS = Decimal("0.001")

# ============================================================================
# Rounding
# ============================================================================

PARTS_PLACES = 2
SUPPLEMENT_PARTS_PLACES = 3
TOTALS_PLACES = 2
DEFICIT_PLACES = 3
ENERGY_DEFICIT_PLACES = 2
MONEY_PLACES = 2

# ============================================================================
# Nutrient Summary
# ============================================================================

NUTRIENT_SUMMARY_LABELS = (
    ("crude_protein", "Crude Protein (%)", 1),
    ("energy", "ME (kcal/kg)", 1),
    ("calcium", "Calcium (%)", 1),
    ("phosphorus", "Phosphorus (%)", 2),
    ("lysine", "Lysine (%)", 1),
    ("methionine", "Methionine (%)", 1),
)

# Salt is added with the premix, not computed from the mix
SALT_ROW_LABEL = "Salt (%)"
SALT_PERCENT = Decimal("0.3")

# ============================================================================
# File Paths
# ============================================================================

SAVES_DIRECTORY = "saves"

# ============================================================================
# Environment
# ============================================================================

ENV_SAVES_DIRECTORY = "FEED_FORMULATOR_SAVES_DIR"
ENV_LOG_LEVEL = "FEED_FORMULATOR_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Feed Formulator"
APP_VERSION = "0.3.0"
