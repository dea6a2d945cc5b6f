"""Two-source balancing (Pearson's Square).

Splits the parts left after the fixed ingredient and the slack space
between one high-protein source (HPS) and a pool of low-protein
sources (LPS) so that the blend meets the crude protein target.

Diagonal rule, with ``t`` the target and ``h``/``l`` the protein of each
side::

    h ---------- |t - l|   parts of HPS
         \\  /
           t
         /  \\
    l ---------- |h - t|   parts of LPS
"""

import logging
from decimal import Decimal
from typing import Optional

from config.constants import PARTS_PLACES, TOTAL_PARTS
from domain.exceptions import LogicError
from domain.models import (
    CategorizedIngredients,
    IngredientCategory,
    IngredientProfile,
    MixEntry,
    RemainingNeeds,
)
from domain.services.number_parser import round_decimal


class PearsonSquareBalancer:
    """Balance one high-protein ingredient against a low-protein pool."""

    def build_low_protein_pool(
        self,
        categorized: CategorizedIngredients,
        fixed_entry: Optional[MixEntry],
    ) -> tuple[IngredientProfile, ...]:
        """Energy and Medium Source ingredients, in that order.

        When an ingredient was pinned, every Medium Source ingredient is
        left out of the pool, not only the pinned one.
        """
        pool = categorized.energy_sources + categorized.medium_sources
        if fixed_entry is None:
            return pool
        return tuple(
            ing for ing in pool if ing.category is not IngredientCategory.MEDIUM_SOURCE
        )

    def select_high_protein_source(
        self,
        categorized: CategorizedIngredients,
        fixed_entry: Optional[MixEntry],
    ) -> IngredientProfile:
        """Protein source with the most crude protein; first one wins ties.

        Raises:
            LogicError: If no protein source is available
        """
        candidates = [
            ing
            for ing in categorized.protein_sources
            if fixed_entry is None or ing.id != fixed_entry.ingredient_id
        ]
        if not candidates:
            raise LogicError("No protein sources selected. Please select at least one protein source.")

        best = candidates[0]
        for ingredient in candidates[1:]:
            if ingredient.crude_protein > best.crude_protein:
                best = ingredient
        return best

    def balance(
        self,
        categorized: CategorizedIngredients,
        remaining: RemainingNeeds,
        fixed_entry: Optional[MixEntry] = None,
    ) -> list[MixEntry]:
        """Allocate the remaining parts between the HPS and the LPS pool.

        Args:
            categorized: Ingredient pool split by category
            remaining: Parts and nutrients left after the fixed ingredient
            fixed_entry: The pinned ingredient, if any

        Returns:
            The HPS entry followed by one entry per LPS ingredient

        Raises:
            LogicError: If the LPS pool or the protein sources are empty
        """
        lps_pool = self.build_low_protein_pool(categorized, fixed_entry)
        if not lps_pool:
            raise LogicError("No energy/medium sources selected. Please select at least one energy source.")

        hps = self.select_high_protein_source(categorized, fixed_entry)

        # Unweighted mean: every pool member gets an equal share
        lps_count = Decimal(len(lps_pool))
        lps_avg_cp = sum((ing.crude_protein for ing in lps_pool), Decimal("0")) / lps_count

        remaining_parts = remaining.remaining_parts
        adjusted_target = remaining.nutrients.crude_protein / remaining_parts * TOTAL_PARTS

        hps_diff = abs(adjusted_target - lps_avg_cp)
        lps_diff = abs(hps.crude_protein - adjusted_target)
        total_diff = hps_diff + lps_diff

        if total_diff == 0:
            # Both sides already sit on the target
            hps_parts = Decimal("0")
            lps_parts = remaining_parts
        else:
            hps_parts = hps_diff / total_diff * remaining_parts
            lps_parts = lps_diff / total_diff * remaining_parts

        logging.debug(
            "Pearson square: target=%s lps_avg=%s hps=%s (%s) hps_parts=%s lps_parts=%s",
            adjusted_target,
            lps_avg_cp,
            hps.name,
            hps.crude_protein,
            hps_parts,
            lps_parts,
        )

        entries = [MixEntry.from_ingredient(hps, round_decimal(hps_parts, PARTS_PLACES))]
        lps_parts_each = round_decimal(lps_parts / lps_count, PARTS_PLACES)
        for ingredient in lps_pool:
            entries.append(MixEntry.from_ingredient(ingredient, lps_parts_each))
        return entries
