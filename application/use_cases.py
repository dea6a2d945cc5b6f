"""Application use cases.

Use cases orchestrate domain services and infrastructure to fulfill
business workflows.
"""

import logging
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from config.constants import TOTAL_PARTS
from domain.exceptions import FeedFormulatorError
from domain.models import (
    FormulationRecord,
    FormulationRequest,
    FormulationResult,
    IngredientProfile,
)
from domain.services.cost_service import calculate_cost_summary
from domain.services.formulation_service import FormulationService
from domain.services.nutrient_calculator import NutrientCalculator
from domain.services.pearson_square import PearsonSquareBalancer
from domain.services.result_formatter import ResultFormatter
from domain.services.supplement_filler import SupplementFiller
from infrastructure.catalog.ingredient_importer import IngredientCatalogImporter
from infrastructure.persistence.excel_exporter import ExcelExporter
from infrastructure.persistence.json_repository import JSONFormulationRepository


class CalculateFormulationUseCase:
    """Compute a feed mix for a nutrient target and an ingredient pool."""

    def __init__(
        self,
        formulation_service: FormulationService,
        balancer: PearsonSquareBalancer,
        calculator: NutrientCalculator,
        supplement_filler: SupplementFiller,
        formatter: ResultFormatter,
    ) -> None:
        self._formulation_service = formulation_service
        self._balancer = balancer
        self._calculator = calculator
        self._supplement_filler = supplement_filler
        self._formatter = formatter

    def execute(self, request: FormulationRequest) -> FormulationResult:
        """Run the calculation pipeline.

        Args:
            request: Batch weight, nutrient target and ingredient pool

        Returns:
            The finished formulation

        Raises:
            ValidationError: If a required input is missing
            LogicError: If the ingredient pool cannot be balanced
        """
        try:
            return self._calculate(request)
        except FeedFormulatorError as exc:
            logging.error("Feed formulation failed: %s", exc)
            raise

    def _calculate(self, request: FormulationRequest) -> FormulationResult:
        service = self._formulation_service
        service.validate_inputs(
            request.batch_weight_kg, request.nutrient_target, request.ingredients
        )
        batch_weight = request.batch_weight_kg
        target = request.nutrient_target

        categorized = service.categorize_ingredients(request.ingredients)
        fixed_entry = service.select_fixed_ingredient(categorized)
        remaining = service.calculate_remaining_needs(target, fixed_entry)
        logging.debug(
            "Remaining parts=%s crude_protein=%s",
            remaining.remaining_parts,
            remaining.nutrients.crude_protein,
        )

        balanced = self._balancer.balance(categorized, remaining, fixed_entry)
        main_entries = ([fixed_entry] if fixed_entry is not None else []) + balanced

        main_totals = self._calculator.calculate_totals(main_entries)
        main_deficits = self._calculator.calculate_deficits(target, main_totals)
        # Slack space is whatever the rounded main parts leave of the batch
        main_parts = sum((entry.parts for entry in main_entries), Decimal("0"))
        supplements = self._supplement_filler.fill(main_deficits, TOTAL_PARTS - main_parts)

        entries = tuple(main_entries + supplements)
        provided = self._calculator.calculate_totals(entries)
        logging.debug("Formulation complete: %d entries", len(entries))

        return FormulationResult(
            batch_weight_kg=batch_weight,
            ingredients=entries,
            required=target,
            provided=provided,
            deficits=self._calculator.calculate_deficits(target, provided),
            cost=calculate_cost_summary(entries, batch_weight),
            mix_table=self._formatter.build_mix_table(entries, batch_weight),
            nutrient_summary=self._formatter.build_nutrient_summary(target, provided),
            cost_analysis=self._formatter.build_cost_analysis(entries, batch_weight),
            labels=request.labels,
        )


class SaveFormulationUseCase:
    """Store a calculated formulation."""

    def __init__(self, json_repository: JSONFormulationRepository) -> None:
        self._repository = json_repository

    def execute(self, result: FormulationResult) -> FormulationRecord:
        return self._repository.save(result)


class LoadFormulationUseCase:
    """Load a stored formulation by id."""

    def __init__(self, json_repository: JSONFormulationRepository) -> None:
        self._repository = json_repository

    def execute(self, formulation_id: str) -> FormulationRecord:
        return self._repository.load(formulation_id)


class ListFormulationsUseCase:
    """List stored formulations, newest first."""

    def __init__(self, json_repository: JSONFormulationRepository) -> None:
        self._repository = json_repository

    def execute(self) -> List[FormulationRecord]:
        return self._repository.list_records()


class DeleteFormulationUseCase:
    """Delete a stored formulation."""

    def __init__(self, json_repository: JSONFormulationRepository) -> None:
        self._repository = json_repository

    def execute(self, formulation_id: str) -> None:
        self._repository.delete(formulation_id)


class ExportFormulationUseCase:
    """Export formulation views to Excel."""

    def __init__(self, exporter: ExcelExporter) -> None:
        self._exporter = exporter

    def execute(
        self,
        result: FormulationResult,
        output_path: Path | str,
    ) -> None:
        """Export formulation to Excel.

        Args:
            result: Formulation to export
            output_path: Output file path
        """
        self._exporter.export_formulation(result, output_path)


class ImportIngredientsUseCase:
    """Read ingredient profiles from a catalog file."""

    def __init__(self, importer: IngredientCatalogImporter) -> None:
        self._importer = importer

    def execute(
        self,
        path: Path | str,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[IngredientProfile]:
        """Load a catalog, optionally filtered.

        Args:
            path: CSV or Excel catalog file
            category: Keep only this category
            search: Keep only names containing this text (case-insensitive)

        Returns:
            Matching ingredients, in file order
        """
        ingredients = self._importer.load(path)
        return self._importer.filter(ingredients, category=category, search=search)
