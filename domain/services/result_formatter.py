"""Presentation views of a finished feed mix.

Builds the mix table, the nutrient comparison and the cost analysis
shown to the user.
"""

from decimal import Decimal
from typing import Sequence

from config.constants import (
    MONEY_PLACES,
    NUTRIENT_SUMMARY_LABELS,
    PARTS_PLACES,
    SALT_PERCENT,
    SALT_ROW_LABEL,
    TOTALS_PLACES,
)
from domain.models import (
    CostAnalysis,
    MixEntry,
    MixTableRow,
    NutrientProfile,
    NutrientSummaryRow,
    NutrientTarget,
)
from domain.services.cost_service import calculate_cost_analysis
from domain.services.number_parser import round_decimal


class ResultFormatter:
    """Assemble the three result views."""

    def build_mix_table(
        self,
        entries: Sequence[MixEntry],
        batch_weight_kg: Decimal,
    ) -> tuple[MixTableRow, ...]:
        """One row per entry with its share, weight and cost in the batch."""
        rows = []
        for entry in entries:
            percentage = round_decimal(entry.parts, PARTS_PLACES)
            amount_kg = round_decimal(percentage / Decimal("100") * batch_weight_kg, MONEY_PLACES)
            price_per_kg = round_decimal(entry.cost_per_kg, MONEY_PLACES)
            rows.append(
                MixTableRow(
                    ingredient=entry.name,
                    percentage=percentage,
                    amount_kg=amount_kg,
                    price_per_kg=price_per_kg,
                    total_cost=round_decimal(amount_kg * price_per_kg, MONEY_PLACES),
                    is_fixed=entry.is_fixed,
                    is_supplement=entry.is_supplement,
                )
            )
        return tuple(rows)

    def build_nutrient_summary(
        self,
        required: NutrientTarget,
        achieved: NutrientProfile,
    ) -> tuple[NutrientSummaryRow, ...]:
        """Required against achieved, per nutrient, plus the salt row.

        Salt comes with the premix and is reported at a constant level
        rather than computed from the mix.
        """
        required_profile = required.as_profile()
        rows = [
            NutrientSummaryRow(
                name=label,
                required=round_decimal(required_profile.get(nutrient), places),
                achieved=round_decimal(achieved.get(nutrient), TOTALS_PLACES),
            )
            for nutrient, label, places in NUTRIENT_SUMMARY_LABELS
        ]
        rows.append(
            NutrientSummaryRow(
                name=SALT_ROW_LABEL,
                required=round_decimal(SALT_PERCENT, 1),
                achieved=round_decimal(SALT_PERCENT, 1),
            )
        )
        return tuple(rows)

    def build_cost_analysis(
        self,
        entries: Sequence[MixEntry],
        batch_weight_kg: Decimal,
    ) -> CostAnalysis:
        return calculate_cost_analysis(entries, batch_weight_kg)
