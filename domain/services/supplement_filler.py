"""Supplement filler.

Closes nutrient deficits left by the main ingredients with pure
supplements, spending the slack space reserved for them.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from config.constants import (
    HUNDRED_PERCENT,
    MIN_ENERGY_DEFICIT,
    MIN_FILLER_PARTS,
    MIN_NUTRIENT_DEFICIT,
    SLACK_SPACE_PARTS,
    SUPPLEMENT_PARTS_PLACES,
)
from domain.models import MixEntry, NutrientProfile, SupplementSpec, SupplementTable
from domain.services.number_parser import round_decimal


@dataclass(frozen=True)
class CorrectionRule:
    """Add ``supplement`` when ``nutrient`` falls short by more than ``threshold``."""

    nutrient: str
    supplement: SupplementSpec
    threshold: Decimal

    def required_parts(self, deficit: Decimal) -> Decimal:
        if deficit <= self.threshold:
            return Decimal("0")
        purity = self.supplement.nutrients.get(self.nutrient)
        return deficit / (purity / HUNDRED_PERCENT)


class SlackBudget:
    """Parts of the mix reserved for supplements."""

    def __init__(self, total: Decimal) -> None:
        self._total = total
        self._used = Decimal("0")

    @property
    def remaining(self) -> Decimal:
        return self._total - self._used

    def grant(self, requested: Decimal) -> Decimal:
        """Consume up to ``requested`` parts and return what was granted."""
        granted = min(requested, max(self.remaining, Decimal("0")))
        self._used += granted
        return granted


class SupplementFiller:
    """Apply correction rules once each, in a fixed order.

    Every rule works from the deficits measured before any supplement
    was added. The only adjustment is for nutrients that an earlier
    supplement already supplied (calcium from dicalcium phosphate).
    """

    def __init__(
        self,
        supplements: Optional[SupplementTable] = None,
        slack_parts: Decimal = SLACK_SPACE_PARTS,
    ) -> None:
        self._supplements = supplements or SupplementTable.default()
        self._slack_parts = slack_parts

    def rules(self) -> tuple[CorrectionRule, ...]:
        table = self._supplements
        return (
            CorrectionRule("lysine", table.lysine, MIN_NUTRIENT_DEFICIT),
            CorrectionRule("methionine", table.methionine, MIN_NUTRIENT_DEFICIT),
            CorrectionRule("phosphorus", table.dicalcium_phosphate, MIN_NUTRIENT_DEFICIT),
            CorrectionRule("calcium", table.calcium_carbonate, MIN_NUTRIENT_DEFICIT),
            CorrectionRule("energy", table.energy_oil, MIN_ENERGY_DEFICIT),
        )

    def fill(
        self,
        deficits: NutrientProfile,
        available_parts: Optional[Decimal] = None,
    ) -> list[MixEntry]:
        """Build the supplement entries for the given deficits.

        Args:
            deficits: Target minus what the main ingredients provide
            available_parts: Parts the main ingredients left free (defaults
                to the slack space). Rounding of the main parts can move
                this a few hundredths away from the slack space.

        Returns:
            Supplement entries in rule order, ending with the inert premix
            when slack space is left over
        """
        if available_parts is None:
            available_parts = self._slack_parts
        budget = SlackBudget(available_parts)
        supplied = NutrientProfile()
        entries: list[MixEntry] = []

        for rule in self.rules():
            deficit = deficits.get(rule.nutrient) - supplied.get(rule.nutrient)
            required = rule.required_parts(deficit)
            if required <= 0:
                continue

            parts = budget.grant(required)
            if parts < required:
                logging.warning(
                    "Slack space exhausted: %s limited to %s of %s parts",
                    rule.supplement.name,
                    parts,
                    required,
                )
            if parts <= 0:
                continue

            logging.debug("Adding %s parts of %s for %s", parts, rule.supplement.name, rule.nutrient)
            supplied = supplied.plus(rule.supplement.nutrients.contribution(parts))
            entries.append(rule.supplement.to_entry(round_decimal(parts, SUPPLEMENT_PARTS_PLACES)))

        # The premix closes the mix to exactly the available parts
        leftover = available_parts - sum((entry.parts for entry in entries), Decimal("0"))
        if leftover > MIN_FILLER_PARTS:
            premix = self._supplements.premix
            entries.append(premix.to_entry(round_decimal(leftover, SUPPLEMENT_PARTS_PLACES)))

        return entries
