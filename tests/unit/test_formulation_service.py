"""Tests for FormulationService."""

from decimal import Decimal

import pytest

from domain.exceptions import ValidationError
from domain.models import IngredientCategory, IngredientProfile, NutrientTarget
from domain.services.formulation_service import FormulationService


def _ingredient(ingredient_id: str, category: IngredientCategory, **values: str) -> IngredientProfile:
    return IngredientProfile(
        id=ingredient_id,
        name=ingredient_id.title(),
        category=category,
        **{key: Decimal(value) for key, value in values.items()},
    )


@pytest.fixture
def service() -> FormulationService:
    """Create FormulationService instance."""
    return FormulationService()


@pytest.fixture
def target() -> NutrientTarget:
    return NutrientTarget(
        crude_protein=Decimal("18"),
        energy_kcal_per_kg=Decimal("2600"),
        calcium=Decimal("0.9"),
    )


@pytest.fixture
def pool() -> list[IngredientProfile]:
    """Mixed pool: energy, medium, protein, mineral, medium."""
    return [
        _ingredient("maize", IngredientCategory.ENERGY_SOURCE, crude_protein="8.5"),
        _ingredient("rice polish", IngredientCategory.MEDIUM_SOURCE, crude_protein="12", energy="2500", calcium="0.1"),
        _ingredient("soybean meal", IngredientCategory.PROTEIN_SOURCE, crude_protein="44"),
        _ingredient("limestone", IngredientCategory.MINERAL_SOURCE, calcium="38"),
        _ingredient("wheat bran", IngredientCategory.MEDIUM_SOURCE, crude_protein="15"),
    ]


class TestValidateInputs:
    """Test validate_inputs method."""

    def test_accepts_complete_input(
        self,
        service: FormulationService,
        target: NutrientTarget,
        pool: list[IngredientProfile],
    ) -> None:
        service.validate_inputs(Decimal("100"), target, pool)

    def test_raises_for_empty_ingredients(
        self,
        service: FormulationService,
        target: NutrientTarget,
    ) -> None:
        with pytest.raises(ValidationError, match="No ingredients selected"):
            service.validate_inputs(Decimal("100"), target, [])

    def test_raises_for_missing_target(
        self,
        service: FormulationService,
        pool: list[IngredientProfile],
    ) -> None:
        with pytest.raises(ValidationError, match="Nutritional requirements not provided"):
            service.validate_inputs(Decimal("100"), None, pool)

    @pytest.mark.parametrize("crude_protein", [None, Decimal("0")])
    def test_raises_for_missing_crude_protein(
        self,
        service: FormulationService,
        pool: list[IngredientProfile],
        crude_protein,
    ) -> None:
        target = NutrientTarget(crude_protein=crude_protein, energy_kcal_per_kg=Decimal("2600"))

        with pytest.raises(ValidationError, match="crudeProtein"):
            service.validate_inputs(Decimal("100"), target, pool)

    def test_raises_for_missing_energy(
        self,
        service: FormulationService,
        pool: list[IngredientProfile],
    ) -> None:
        target = NutrientTarget(crude_protein=Decimal("18"))

        with pytest.raises(ValidationError, match="energyKcalPerKg"):
            service.validate_inputs(Decimal("100"), target, pool)

    @pytest.mark.parametrize(
        "batch_weight",
        [None, Decimal("0"), Decimal("-5"), Decimal("NaN"), Decimal("Infinity")],
    )
    def test_raises_for_invalid_batch_weight(
        self,
        service: FormulationService,
        target: NutrientTarget,
        pool: list[IngredientProfile],
        batch_weight,
    ) -> None:
        with pytest.raises(ValidationError, match="must be positive"):
            service.validate_inputs(batch_weight, target, pool)


class TestCategorizeIngredients:
    """Test categorize_ingredients method."""

    def test_groups_by_category_in_input_order(
        self,
        service: FormulationService,
        pool: list[IngredientProfile],
    ) -> None:
        categorized = service.categorize_ingredients(pool)

        assert [i.id for i in categorized.energy_sources] == ["maize"]
        assert [i.id for i in categorized.protein_sources] == ["soybean meal"]
        assert [i.id for i in categorized.medium_sources] == ["rice polish", "wheat bran"]

    def test_mineral_sources_only_in_full_list(
        self,
        service: FormulationService,
        pool: list[IngredientProfile],
    ) -> None:
        categorized = service.categorize_ingredients(pool)

        grouped = categorized.energy_sources + categorized.protein_sources + categorized.medium_sources
        assert all(i.id != "limestone" for i in grouped)
        assert len(categorized.all) == 5


class TestSelectFixedIngredient:
    """Test select_fixed_ingredient method."""

    def test_pins_first_medium_source(
        self,
        service: FormulationService,
        pool: list[IngredientProfile],
    ) -> None:
        fixed = service.select_fixed_ingredient(service.categorize_ingredients(pool))

        assert fixed is not None
        assert fixed.ingredient_id == "rice polish"
        assert fixed.parts == Decimal("10")
        assert fixed.is_fixed is True
        assert fixed.is_supplement is False

    def test_input_order_decides(
        self,
        service: FormulationService,
        pool: list[IngredientProfile],
    ) -> None:
        reordered = list(reversed(pool))

        fixed = service.select_fixed_ingredient(service.categorize_ingredients(reordered))

        assert fixed is not None
        assert fixed.ingredient_id == "wheat bran"

    def test_returns_none_without_medium_source(
        self,
        service: FormulationService,
        pool: list[IngredientProfile],
    ) -> None:
        no_medium = [i for i in pool if i.category is not IngredientCategory.MEDIUM_SOURCE]

        assert service.select_fixed_ingredient(service.categorize_ingredients(no_medium)) is None


class TestCalculateRemainingNeeds:
    """Test calculate_remaining_needs method."""

    def test_without_fixed_ingredient_keeps_target(
        self,
        service: FormulationService,
        target: NutrientTarget,
    ) -> None:
        remaining = service.calculate_remaining_needs(target, None)

        assert remaining.remaining_parts == Decimal("90")
        assert remaining.nutrients.crude_protein == Decimal("18")
        assert remaining.nutrients.energy == Decimal("2600")
        assert remaining.nutrients.lysine == Decimal("0")

    def test_subtracts_fixed_contribution(
        self,
        service: FormulationService,
        target: NutrientTarget,
        pool: list[IngredientProfile],
    ) -> None:
        fixed = service.select_fixed_ingredient(service.categorize_ingredients(pool))

        remaining = service.calculate_remaining_needs(target, fixed)

        # Rice polish at 10 parts: CP 1.2, energy 250, calcium 0.01
        assert remaining.remaining_parts == Decimal("80")
        assert remaining.nutrients.crude_protein == Decimal("16.8")
        assert remaining.nutrients.energy == Decimal("2350")
        assert remaining.nutrients.calcium == Decimal("0.89")
