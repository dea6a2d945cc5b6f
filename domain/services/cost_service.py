from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from config.constants import MONEY_PLACES, TOTAL_PARTS
from domain.models import CostAnalysis, CostSummary, MixEntry
from domain.services.number_parser import round_decimal


def _money(value: Decimal) -> Decimal:
    return round_decimal(value, MONEY_PLACES)


def cost_per_100_parts(entries: Sequence[MixEntry]) -> Decimal:
    return sum((entry.parts * entry.cost_per_kg for entry in entries), Decimal("0"))


def entry_amount_kg(entry: MixEntry, batch_weight_kg: Decimal) -> Decimal:
    return entry.parts / TOTAL_PARTS * batch_weight_kg


def calculate_cost_summary(
    entries: Sequence[MixEntry], batch_weight_kg: Decimal
) -> CostSummary:
    per_100_parts = cost_per_100_parts(entries)
    per_kg = per_100_parts / TOTAL_PARTS
    return CostSummary(
        cost_per_100_parts=_money(per_100_parts),
        cost_per_kg=_money(per_kg),
        total_cost=_money(per_kg * batch_weight_kg),
        batch_weight_kg=batch_weight_kg,
    )


def calculate_cost_analysis(
    entries: Sequence[MixEntry], batch_weight_kg: Decimal
) -> CostAnalysis:
    total = sum(
        (entry_amount_kg(entry, batch_weight_kg) * entry.cost_per_kg for entry in entries),
        Decimal("0"),
    )
    per_kg = total / batch_weight_kg if batch_weight_kg > 0 else Decimal("0")
    return CostAnalysis(
        total_feed_cost=_money(total),
        cost_per_kg=_money(per_kg),
        batch_weight_kg=batch_weight_kg,
    )
