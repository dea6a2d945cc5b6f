"""Tests for request parsing and response serialization."""

from decimal import Decimal

import pytest

from application.payloads import (
    mix_entry_to_dict,
    parse_formulation_request,
    parse_ingredient,
    parse_nutrient_target,
)
from domain.exceptions import ValidationError
from domain.models import IngredientCategory, MixEntry, NutrientProfile


class TestParseIngredient:
    """Test parse_ingredient."""

    def test_parses_camel_case_fields(self) -> None:
        ingredient = parse_ingredient(
            {
                "id": "sbm",
                "name": "Soybean Meal",
                "category": "Protein Source",
                "crudeProtein": 44,
                "energy": "2230",
                "cost": 45,
            }
        )

        assert ingredient.id == "sbm"
        assert ingredient.category is IngredientCategory.PROTEIN_SOURCE
        assert ingredient.crude_protein == Decimal("44")
        assert ingredient.energy == Decimal("2230")
        assert ingredient.cost_per_kg == Decimal("45")
        assert ingredient.lysine == Decimal("0")

    def test_accepts_alternative_spellings(self) -> None:
        ingredient = parse_ingredient(
            {
                "ingredientId": "m1",
                "name": "Maize",
                "category": "ENERGY_SOURCE",
                "meKcalPerKg": "3300",
                "costPerKg": "20,5",
            }
        )

        assert ingredient.id == "m1"
        assert ingredient.category is IngredientCategory.ENERGY_SOURCE
        assert ingredient.energy == Decimal("3300")
        assert ingredient.cost_per_kg == Decimal("20.5")

    def test_id_falls_back_to_name(self) -> None:
        ingredient = parse_ingredient({"name": "Maize", "category": "Energy Source"})

        assert ingredient.id == "Maize"

    @pytest.mark.parametrize(
        "data, message",
        [
            ({"category": "Energy Source"}, "name is required"),
            ({"name": "Maize"}, "category is required"),
            ({"name": "Maize", "category": "Vitamin Source"}, "Unknown ingredient category"),
            ({"name": "Maize", "category": "Energy Source", "crudeProtein": "abc"}, "Invalid numeric value"),
            ({"name": "Maize", "category": "Energy Source", "crudeProtein": -2}, "cannot be negative"),
        ],
    )
    def test_rejects_invalid_ingredient(self, data: dict, message: str) -> None:
        with pytest.raises(ValidationError, match=message):
            parse_ingredient(data)


class TestParseNutrientTarget:
    """Test parse_nutrient_target."""

    def test_none_stays_none(self) -> None:
        assert parse_nutrient_target(None) is None

    def test_missing_values_stay_none(self) -> None:
        target = parse_nutrient_target({"crudeProtein": 18, "meKcalPerKg": 2600})

        assert target is not None
        assert target.crude_protein == Decimal("18")
        assert target.energy_kcal_per_kg == Decimal("2600")
        assert target.calcium is None

    def test_rejects_non_object(self) -> None:
        with pytest.raises(ValidationError):
            parse_nutrient_target(["18"])


class TestParseFormulationRequest:
    """Test parse_formulation_request."""

    def test_original_api_field_names(self) -> None:
        request = parse_formulation_request(
            {
                "feedBatchWeight": 100,
                "species": "Poultry",
                "animalType": "Broiler",
                "phase": "Starter",
                "nutritionalRequirements": {"crudeProtein": 22, "energyKcalPerKg": 3000},
                "availableIngredients": [{"name": "Maize", "category": "Energy Source"}],
            }
        )

        assert request.batch_weight_kg == Decimal("100")
        assert request.nutrient_target.crude_protein == Decimal("22")
        assert [i.name for i in request.ingredients] == ["Maize"]
        assert request.labels.species == "Poultry"
        assert request.labels.animal_type == "Broiler"
        assert request.labels.subspecies is None

    def test_missing_parts_are_left_to_validation(self) -> None:
        request = parse_formulation_request({})

        assert request.batch_weight_kg is None
        assert request.nutrient_target is None
        assert request.ingredients == ()

    def test_ingredients_must_be_a_list(self) -> None:
        with pytest.raises(ValidationError, match="must be a list"):
            parse_formulation_request({"ingredients": {"name": "Maize"}})


def test_mix_entry_to_dict() -> None:
    entry = MixEntry(
        ingredient_id="supplement_lysine",
        name="L-Lysine HCl",
        parts=Decimal("0.1"),
        nutrients=NutrientProfile(lysine=Decimal("78")),
        is_supplement=True,
    )

    data = mix_entry_to_dict(entry)

    assert data["ingredientId"] == "supplement_lysine"
    assert data["parts"] == 0.1
    assert data["lysine"] == 78.0
    assert data["isSupplement"] is True
    assert data["isFixed"] is False


@pytest.mark.parametrize("value", [float("nan"), float("inf"), 1e999, "NaN", "-Infinity", Decimal("NaN")])
def test_non_finite_numbers_are_rejected(value) -> None:
    with pytest.raises(ValidationError, match="Invalid numeric value for batchWeightKg"):
        parse_formulation_request({"batchWeightKg": value})
