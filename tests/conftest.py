"""Shared fixtures."""

from decimal import Decimal
from pathlib import Path

import pytest

from config.container import Container
from domain.models import (
    FormulationLabels,
    FormulationRequest,
    FormulationResult,
    IngredientCategory,
    IngredientProfile,
    NutrientTarget,
)


@pytest.fixture
def container(tmp_path: Path) -> Container:
    """Container storing formulations under a temporary directory."""
    return Container(saves_directory=tmp_path / "saves")


@pytest.fixture
def maize() -> IngredientProfile:
    return IngredientProfile(
        id="maize",
        name="Maize",
        category=IngredientCategory.ENERGY_SOURCE,
        crude_protein=Decimal("8.5"),
        energy=Decimal("3300"),
        cost_per_kg=Decimal("20"),
    )


@pytest.fixture
def soybean_meal() -> IngredientProfile:
    return IngredientProfile(
        id="sbm",
        name="Soybean Meal",
        category=IngredientCategory.PROTEIN_SOURCE,
        crude_protein=Decimal("44"),
        energy=Decimal("2230"),
        cost_per_kg=Decimal("45"),
    )


@pytest.fixture
def maize_soybean_request(
    maize: IngredientProfile, soybean_meal: IngredientProfile
) -> FormulationRequest:
    """100 kg batch at 18% crude protein and 2600 kcal/kg."""
    return FormulationRequest(
        batch_weight_kg=Decimal("100"),
        nutrient_target=NutrientTarget(
            crude_protein=Decimal("18"),
            energy_kcal_per_kg=Decimal("2600"),
        ),
        ingredients=(maize, soybean_meal),
        labels=FormulationLabels(species="Poultry", animal_type="Layer", phase="Grower"),
    )


@pytest.fixture
def calculated(container: Container, maize_soybean_request: FormulationRequest) -> FormulationResult:
    return container.calculate_formulation.execute(maize_soybean_request)
