"""Dependency Injection container.

Provides centralized dependency management for the application.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from application.use_cases import (
    CalculateFormulationUseCase,
    DeleteFormulationUseCase,
    ExportFormulationUseCase,
    ImportIngredientsUseCase,
    ListFormulationsUseCase,
    LoadFormulationUseCase,
    SaveFormulationUseCase,
)
from config.constants import ENV_SAVES_DIRECTORY, SAVES_DIRECTORY
from domain.models import SupplementTable
from domain.services.formulation_service import FormulationService
from domain.services.nutrient_calculator import NutrientCalculator
from domain.services.pearson_square import PearsonSquareBalancer
from domain.services.result_formatter import ResultFormatter
from domain.services.supplement_filler import SupplementFiller
from infrastructure.catalog.ingredient_importer import IngredientCatalogImporter
from infrastructure.persistence.excel_exporter import ExcelExporter
from infrastructure.persistence.json_repository import JSONFormulationRepository

load_dotenv()


class Container:
    """Dependency injection container.

    Provides singleton instances of services and use cases.
    """

    def __init__(
        self,
        saves_directory: Optional[str | Path] = None,
        supplements: Optional[SupplementTable] = None,
    ) -> None:
        """Initialize container.

        Args:
            saves_directory: Where formulations are stored (if None, reads
                from environment, then falls back to ``saves``)
            supplements: Supplement purity table (if None, uses the default)
        """
        self._saves_directory = (
            saves_directory or os.getenv(ENV_SAVES_DIRECTORY) or SAVES_DIRECTORY
        )
        self._supplements = supplements or SupplementTable.default()

        # Lazy-initialized singletons
        self._json_repository: Optional[JSONFormulationRepository] = None
        self._excel_exporter: Optional[ExcelExporter] = None
        self._ingredient_importer: Optional[IngredientCatalogImporter] = None

        self._formulation_service: Optional[FormulationService] = None
        self._balancer: Optional[PearsonSquareBalancer] = None
        self._nutrient_calculator: Optional[NutrientCalculator] = None
        self._supplement_filler: Optional[SupplementFiller] = None
        self._result_formatter: Optional[ResultFormatter] = None

        self._calculate_formulation_use_case: Optional[CalculateFormulationUseCase] = None
        self._save_formulation_use_case: Optional[SaveFormulationUseCase] = None
        self._load_formulation_use_case: Optional[LoadFormulationUseCase] = None
        self._list_formulations_use_case: Optional[ListFormulationsUseCase] = None
        self._delete_formulation_use_case: Optional[DeleteFormulationUseCase] = None
        self._export_formulation_use_case: Optional[ExportFormulationUseCase] = None
        self._import_ingredients_use_case: Optional[ImportIngredientsUseCase] = None

    # Infrastructure
    @property
    def json_repository(self) -> JSONFormulationRepository:
        """Get JSON formulation repository."""
        if self._json_repository is None:
            self._json_repository = JSONFormulationRepository(
                base_directory=self._saves_directory
            )
        return self._json_repository

    @property
    def excel_exporter(self) -> ExcelExporter:
        """Get Excel exporter."""
        if self._excel_exporter is None:
            self._excel_exporter = ExcelExporter()
        return self._excel_exporter

    @property
    def ingredient_importer(self) -> IngredientCatalogImporter:
        """Get ingredient catalog importer."""
        if self._ingredient_importer is None:
            self._ingredient_importer = IngredientCatalogImporter()
        return self._ingredient_importer

    # Domain Services
    @property
    def formulation_service(self) -> FormulationService:
        """Get formulation service."""
        if self._formulation_service is None:
            self._formulation_service = FormulationService()
        return self._formulation_service

    @property
    def balancer(self) -> PearsonSquareBalancer:
        """Get Pearson's square balancer."""
        if self._balancer is None:
            self._balancer = PearsonSquareBalancer()
        return self._balancer

    @property
    def nutrient_calculator(self) -> NutrientCalculator:
        """Get nutrient calculator service."""
        if self._nutrient_calculator is None:
            self._nutrient_calculator = NutrientCalculator()
        return self._nutrient_calculator

    @property
    def supplement_filler(self) -> SupplementFiller:
        """Get supplement filler."""
        if self._supplement_filler is None:
            self._supplement_filler = SupplementFiller(self._supplements)
        return self._supplement_filler

    @property
    def result_formatter(self) -> ResultFormatter:
        """Get result formatter."""
        if self._result_formatter is None:
            self._result_formatter = ResultFormatter()
        return self._result_formatter

    # Use Cases
    @property
    def calculate_formulation(self) -> CalculateFormulationUseCase:
        """Get calculate formulation use case."""
        if self._calculate_formulation_use_case is None:
            self._calculate_formulation_use_case = CalculateFormulationUseCase(
                formulation_service=self.formulation_service,
                balancer=self.balancer,
                calculator=self.nutrient_calculator,
                supplement_filler=self.supplement_filler,
                formatter=self.result_formatter,
            )
        return self._calculate_formulation_use_case

    @property
    def save_formulation(self) -> SaveFormulationUseCase:
        """Get save formulation use case."""
        if self._save_formulation_use_case is None:
            self._save_formulation_use_case = SaveFormulationUseCase(self.json_repository)
        return self._save_formulation_use_case

    @property
    def load_formulation(self) -> LoadFormulationUseCase:
        """Get load formulation use case."""
        if self._load_formulation_use_case is None:
            self._load_formulation_use_case = LoadFormulationUseCase(self.json_repository)
        return self._load_formulation_use_case

    @property
    def list_formulations(self) -> ListFormulationsUseCase:
        """Get list formulations use case."""
        if self._list_formulations_use_case is None:
            self._list_formulations_use_case = ListFormulationsUseCase(self.json_repository)
        return self._list_formulations_use_case

    @property
    def delete_formulation(self) -> DeleteFormulationUseCase:
        """Get delete formulation use case."""
        if self._delete_formulation_use_case is None:
            self._delete_formulation_use_case = DeleteFormulationUseCase(self.json_repository)
        return self._delete_formulation_use_case

    @property
    def export_formulation(self) -> ExportFormulationUseCase:
        """Get export formulation use case."""
        if self._export_formulation_use_case is None:
            self._export_formulation_use_case = ExportFormulationUseCase(self.excel_exporter)
        return self._export_formulation_use_case

    @property
    def import_ingredients(self) -> ImportIngredientsUseCase:
        """Get import ingredients use case."""
        if self._import_ingredients_use_case is None:
            self._import_ingredients_use_case = ImportIngredientsUseCase(self.ingredient_importer)
        return self._import_ingredients_use_case
