"""Request and response payloads.

Converts the camelCase JSON documents exchanged with callers into domain
models and back. Field aliases of the original HTTP API
(``feedBatchWeight``, ``meKcalPerKg``, ``cost``...) are accepted.
"""

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from domain.exceptions import ValidationError
from domain.models import (
    CostAnalysis,
    CostSummary,
    FormulationLabels,
    FormulationRequest,
    FormulationResult,
    IngredientCategory,
    IngredientProfile,
    MixEntry,
    MixTableRow,
    NutrientProfile,
    NutrientSummaryRow,
    NutrientTarget,
)
from domain.services.number_parser import is_blank, parse_decimal

INGREDIENT_NUTRIENT_KEYS = {
    "crude_protein": ("crudeProtein",),
    "energy": ("energy", "meKcalPerKg"),
    "calcium": ("calcium",),
    "phosphorus": ("phosphorus", "availablePhosphorus"),
    "lysine": ("lysine",),
    "methionine": ("methionine",),
    "fiber": ("fiber",),
    "cost_per_kg": ("costPerKg", "cost"),
}

TARGET_KEYS = {
    "crude_protein": ("crudeProtein",),
    "energy_kcal_per_kg": ("energyKcalPerKg", "meKcalPerKg", "energy"),
    "calcium": ("calcium",),
    "available_phosphorus": ("availablePhosphorus", "phosphorus"),
    "lysine": ("lysine",),
    "methionine": ("methionine",),
}


def _first_present(data: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in data and not is_blank(data[key]):
            return data[key]
    return None


def _optional_decimal(data: Mapping[str, Any], keys: tuple[str, ...]) -> Optional[Decimal]:
    raw = _first_present(data, keys)
    if raw is None:
        return None
    value = parse_decimal(raw)
    if value is None:
        raise ValidationError(f"Invalid numeric value for {keys[0]}: {raw!r}")
    return value


def _optional_text(value: Any) -> Optional[str]:
    if is_blank(value):
        return None
    return str(value).strip()


def parse_nutrient_target(data: Optional[Mapping[str, Any]]) -> Optional[NutrientTarget]:
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise ValidationError("Nutrient target must be an object")
    return NutrientTarget(
        **{field: _optional_decimal(data, keys) for field, keys in TARGET_KEYS.items()}
    )


def parse_ingredient(data: Mapping[str, Any]) -> IngredientProfile:
    """Build an ingredient profile; missing nutrients count as zero."""
    if not isinstance(data, Mapping):
        raise ValidationError("Ingredient must be an object")

    name = _optional_text(data.get("name"))
    if name is None:
        raise ValidationError("Ingredient name is required")

    raw_category = data.get("category")
    if is_blank(raw_category):
        raise ValidationError(f"Ingredient category is required: {name}")
    try:
        category = IngredientCategory.from_label(raw_category)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    ingredient_id = _optional_text(data.get("id")) or _optional_text(data.get("ingredientId")) or name
    values = {
        field: _optional_decimal(data, keys) or Decimal("0")
        for field, keys in INGREDIENT_NUTRIENT_KEYS.items()
    }

    try:
        return IngredientProfile(id=ingredient_id, name=name, category=category, **values)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc


def parse_formulation_request(data: Mapping[str, Any]) -> FormulationRequest:
    """Parse a calculation request document.

    Presence checks are left to the formulation service; this function
    only rejects values that cannot be interpreted at all.
    """
    if not isinstance(data, Mapping):
        raise ValidationError("Formulation request must be an object")

    raw_ingredients = data.get("ingredients")
    if raw_ingredients is None:
        raw_ingredients = data.get("availableIngredients") or []
    if not isinstance(raw_ingredients, list):
        raise ValidationError("Ingredients must be a list")

    target_data = data.get("nutrientTarget")
    if target_data is None:
        target_data = data.get("nutritionalRequirements")

    return FormulationRequest(
        batch_weight_kg=_optional_decimal(data, ("batchWeightKg", "feedBatchWeight")),
        nutrient_target=parse_nutrient_target(target_data),
        ingredients=tuple(parse_ingredient(item) for item in raw_ingredients),
        labels=FormulationLabels(
            species=_optional_text(data.get("species")),
            subspecies=_optional_text(data.get("subspecies")),
            animal_type=_optional_text(data.get("animalType")),
            phase=_optional_text(data.get("phase")),
        ),
    )


# ============================================================================
# Response
# ============================================================================


def _number(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def nutrients_to_dict(profile: NutrientProfile) -> Dict[str, float]:
    return {
        "crudeProtein": float(profile.crude_protein),
        "energy": float(profile.energy),
        "calcium": float(profile.calcium),
        "phosphorus": float(profile.phosphorus),
        "lysine": float(profile.lysine),
        "methionine": float(profile.methionine),
    }


def target_to_dict(target: NutrientTarget) -> Dict[str, Optional[float]]:
    return {
        "crudeProtein": _number(target.crude_protein),
        "energyKcalPerKg": _number(target.energy_kcal_per_kg),
        "calcium": _number(target.calcium),
        "availablePhosphorus": _number(target.available_phosphorus),
        "lysine": _number(target.lysine),
        "methionine": _number(target.methionine),
    }


def mix_entry_to_dict(entry: MixEntry) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "ingredientId": entry.ingredient_id,
        "name": entry.name,
        "parts": float(entry.parts),
    }
    data.update(nutrients_to_dict(entry.nutrients))
    data["cost"] = float(entry.cost_per_kg)
    data["isFixed"] = entry.is_fixed
    data["isSupplement"] = entry.is_supplement
    return data


def cost_summary_to_dict(cost: CostSummary) -> Dict[str, float]:
    return {
        "costPer100Parts": float(cost.cost_per_100_parts),
        "costPerKg": float(cost.cost_per_kg),
        "totalCost": float(cost.total_cost),
        "feedBatchWeight": float(cost.batch_weight_kg),
    }


def mix_row_to_dict(row: MixTableRow) -> Dict[str, Any]:
    return {
        "ingredient": row.ingredient,
        "percentage": float(row.percentage),
        "amountKg": float(row.amount_kg),
        "pricePerKg": float(row.price_per_kg),
        "totalCost": float(row.total_cost),
        "isSupplement": row.is_supplement,
        "isFixed": row.is_fixed,
    }


def summary_row_to_dict(row: NutrientSummaryRow) -> Dict[str, Any]:
    return {"name": row.name, "required": float(row.required), "achieved": float(row.achieved)}


def cost_analysis_to_dict(analysis: CostAnalysis) -> Dict[str, float]:
    return {
        "totalFeedCost": float(analysis.total_feed_cost),
        "costPerKg": float(analysis.cost_per_kg),
        "feedBatchWeight": float(analysis.batch_weight_kg),
    }


def formulation_to_response(result: FormulationResult) -> Dict[str, Any]:
    """Serialize a result into the response document."""
    labels = result.labels
    return {
        "formulation": {
            "feedBatchWeight": float(result.batch_weight_kg),
            "species": labels.species,
            "subspecies": labels.subspecies,
            "animalType": labels.animal_type,
            "phase": labels.phase,
            "ingredients": [mix_entry_to_dict(entry) for entry in result.ingredients],
            "nutritionalAnalysis": {
                "provided": nutrients_to_dict(result.provided),
                "required": target_to_dict(result.required),
                "deficits": nutrients_to_dict(result.deficits),
            },
            "costAnalysis": cost_summary_to_dict(result.cost),
        },
        "feedMixResult": [mix_row_to_dict(row) for row in result.mix_table],
        "nutrientSummary": [summary_row_to_dict(row) for row in result.nutrient_summary],
        "costAnalysis": cost_analysis_to_dict(result.cost_analysis),
    }
