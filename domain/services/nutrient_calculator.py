"""Nutrient calculation service.

Handles all nutrient-related calculations for feed mixes.
Pure business logic with no I/O.
"""

from typing import Sequence

from config.constants import DEFICIT_PLACES, ENERGY_DEFICIT_PLACES, TOTALS_PLACES
from domain.models import MixEntry, NutrientProfile, NutrientTarget


class NutrientCalculator:
    """Calculate nutrient totals and deficits for a mix."""

    def calculate_totals(
        self,
        entries: Sequence[MixEntry],
    ) -> NutrientProfile:
        """Calculate the nutrients a list of mix entries provides.

        Args:
            entries: Mix entries, each measured in parts of 100

        Returns:
            Nutrient totals rounded to 2 decimal places

        Note:
            Entry nutrient values are concentrations, so each entry
            contributes ``parts * value / 100``. The totals are not
            normalized by the sum of parts: a partial mix reports what it
            supplies towards the full batch.
        """
        totals = NutrientProfile()
        for entry in entries:
            totals = totals.plus(entry.contribution)
        return totals.rounded(TOTALS_PLACES)

    def calculate_deficits(
        self,
        target: NutrientTarget,
        provided: NutrientProfile,
    ) -> NutrientProfile:
        """Calculate target minus provided, per nutrient.

        Positive values are shortfalls. Energy is rounded to 2 decimal
        places and every other nutrient to 3.
        """
        return target.as_profile().minus(provided).rounded(
            DEFICIT_PLACES, energy_places=ENERGY_DEFICIT_PLACES
        )
