"""Formulation service.

Prepares a calculation: validates the request, groups the ingredient
pool by category, pins the fixed ingredient and works out what the
balanced main ingredients still have to supply.
"""

import logging
from decimal import Decimal
from typing import Optional, Sequence

from config.constants import FIXED_INGREDIENT_PARTS, SLACK_SPACE_PARTS, TOTAL_PARTS
from domain.exceptions import ValidationError
from domain.models import (
    CategorizedIngredients,
    IngredientCategory,
    IngredientProfile,
    MixEntry,
    NutrientTarget,
    RemainingNeeds,
)


class FormulationService:
    """Service for the steps that run before balancing."""

    def validate_inputs(
        self,
        batch_weight_kg: Optional[Decimal],
        nutrient_target: Optional[NutrientTarget],
        ingredients: Sequence[IngredientProfile],
    ) -> None:
        """Check that every required input is present.

        Raises:
            ValidationError: If the batch weight is not positive, the
                target is absent or lacks crude protein or energy, or
                no ingredient was supplied
        """
        if (
            batch_weight_kg is None
            or not batch_weight_kg.is_finite()
            or batch_weight_kg <= 0
        ):
            raise ValidationError(f"Feed batch weight must be positive: {batch_weight_kg}")

        if nutrient_target is None:
            raise ValidationError("Nutritional requirements not provided for this phase")

        if not ingredients:
            raise ValidationError("No ingredients selected. Please select at least one ingredient.")

        # Zero counts as missing
        if not nutrient_target.crude_protein:
            raise ValidationError("Missing required nutritional value: crudeProtein")
        if not nutrient_target.energy_kcal_per_kg:
            raise ValidationError("Missing required nutritional value: energyKcalPerKg")

    def categorize_ingredients(
        self,
        ingredients: Sequence[IngredientProfile],
    ) -> CategorizedIngredients:
        """Split ingredients by category, preserving input order."""

        def of_category(category: IngredientCategory) -> tuple[IngredientProfile, ...]:
            return tuple(ing for ing in ingredients if ing.category is category)

        return CategorizedIngredients(
            energy_sources=of_category(IngredientCategory.ENERGY_SOURCE),
            protein_sources=of_category(IngredientCategory.PROTEIN_SOURCE),
            medium_sources=of_category(IngredientCategory.MEDIUM_SOURCE),
            all=tuple(ingredients),
        )

    def select_fixed_ingredient(
        self,
        categorized: CategorizedIngredients,
    ) -> Optional[MixEntry]:
        """Pin the first Medium Source ingredient at a constant share.

        Returns:
            A fixed mix entry, or None when no Medium Source is present

        Note:
            Input order decides between several Medium Source
            ingredients; only the first one is ever pinned.
        """
        for ingredient in categorized.all:
            if ingredient.category is IngredientCategory.MEDIUM_SOURCE:
                logging.debug(
                    "Fixed ingredient %s at %s parts", ingredient.name, FIXED_INGREDIENT_PARTS
                )
                return MixEntry.from_ingredient(
                    ingredient, FIXED_INGREDIENT_PARTS, is_fixed=True
                )
        return None

    def calculate_remaining_needs(
        self,
        nutrient_target: NutrientTarget,
        fixed_entry: Optional[MixEntry],
    ) -> RemainingNeeds:
        """Subtract the fixed ingredient's contribution from the target.

        The slack space is always withheld from the remaining parts, as is
        the fixed ingredient's share when one was pinned.
        """
        target = nutrient_target.as_profile()

        if fixed_entry is None:
            return RemainingNeeds(
                remaining_parts=TOTAL_PARTS - SLACK_SPACE_PARTS,
                nutrients=target,
            )

        return RemainingNeeds(
            remaining_parts=TOTAL_PARTS - SLACK_SPACE_PARTS - fixed_entry.parts,
            nutrients=target.minus(fixed_entry.contribution),
        )
