"""Tests for IngredientCatalogImporter."""

from decimal import Decimal
from pathlib import Path

import pandas as pd
import pytest

from domain.exceptions import CatalogImportError, ValidationError
from domain.models import IngredientCategory
from infrastructure.catalog.ingredient_importer import IngredientCatalogImporter

CATALOG_CSV = """id,name,category,crude_protein,ME kcal/kg,Calcium,cost
1,Maize,Energy Source,8.5,3300,0.01,20
2,Soybean Meal,Protein Source,44,2230,0.3,45
3,Rice Polish,Medium Source,12,2500,,15
,Limestone,Mineral Source,0,0,38,5
"""


@pytest.fixture
def importer() -> IngredientCatalogImporter:
    return IngredientCatalogImporter()


@pytest.fixture
def catalog_csv(tmp_path: Path) -> Path:
    path = tmp_path / "catalog.csv"
    path.write_text(CATALOG_CSV, encoding="utf-8")
    return path


class TestLoad:
    """Test load method."""

    def test_loads_csv_in_file_order(
        self, importer: IngredientCatalogImporter, catalog_csv: Path
    ) -> None:
        ingredients = importer.load(catalog_csv)

        assert [i.name for i in ingredients] == ["Maize", "Soybean Meal", "Rice Polish", "Limestone"]
        maize = ingredients[0]
        assert maize.id == "1"
        assert maize.category is IngredientCategory.ENERGY_SOURCE
        assert maize.crude_protein == Decimal("8.5")
        assert maize.energy == Decimal("3300")
        assert maize.cost_per_kg == Decimal("20")

    def test_blank_cells_count_as_zero(
        self, importer: IngredientCatalogImporter, catalog_csv: Path
    ) -> None:
        rice = importer.load(catalog_csv)[2]

        assert rice.calcium == Decimal("0")
        assert rice.lysine == Decimal("0")

    def test_missing_id_falls_back_to_name(
        self, importer: IngredientCatalogImporter, catalog_csv: Path
    ) -> None:
        limestone = importer.load(catalog_csv)[3]

        assert limestone.id == "Limestone"

    def test_loads_excel(self, importer: IngredientCatalogImporter, tmp_path: Path) -> None:
        path = tmp_path / "catalog.xlsx"
        pd.DataFrame(
            [
                {"Name": "Wheat", "Category": "EnergySource", "CP": 12, "Price": 18.5},
                {"Name": "Fish Meal", "Category": "protein_source", "CP": 60, "Price": 90},
            ]
        ).to_excel(path, index=False)

        ingredients = importer.load(path)

        assert [i.name for i in ingredients] == ["Wheat", "Fish Meal"]
        assert ingredients[1].category is IngredientCategory.PROTEIN_SOURCE
        assert ingredients[1].crude_protein == Decimal("60")
        assert ingredients[0].cost_per_kg == Decimal("18.5")

    def test_missing_required_columns(
        self, importer: IngredientCatalogImporter, tmp_path: Path
    ) -> None:
        path = tmp_path / "catalog.csv"
        path.write_text("name,crude_protein\nMaize,8.5\n", encoding="utf-8")

        with pytest.raises(CatalogImportError, match="missing columns: category"):
            importer.load(path)

    def test_unknown_category_reports_row(
        self, importer: IngredientCatalogImporter, tmp_path: Path
    ) -> None:
        path = tmp_path / "catalog.csv"
        path.write_text(
            "name,category\nMaize,Energy Source\nPremix,Vitamin Source\n", encoding="utf-8"
        )

        with pytest.raises(CatalogImportError, match="Row 3"):
            importer.load(path)

    def test_invalid_number_reports_row(
        self, importer: IngredientCatalogImporter, tmp_path: Path
    ) -> None:
        path = tmp_path / "catalog.csv"
        path.write_text("name,category,cost\nMaize,Energy Source,cheap\n", encoding="utf-8")

        with pytest.raises(CatalogImportError, match="Row 2 \\(Maize\\): invalid cost_per_kg"):
            importer.load(path)

    def test_missing_file(self, importer: IngredientCatalogImporter, tmp_path: Path) -> None:
        with pytest.raises(CatalogImportError, match="not found"):
            importer.load(tmp_path / "nope.csv")

    def test_unsupported_format(self, importer: IngredientCatalogImporter, tmp_path: Path) -> None:
        path = tmp_path / "catalog.txt"
        path.write_text("name,category\n", encoding="utf-8")

        with pytest.raises(CatalogImportError, match="Unsupported catalog format"):
            importer.load(path)


class TestFilter:
    """Test filter and categories methods."""

    def test_filter_by_category(
        self, importer: IngredientCatalogImporter, catalog_csv: Path
    ) -> None:
        ingredients = importer.load(catalog_csv)

        filtered = importer.filter(ingredients, category="Protein Source")

        assert [i.name for i in filtered] == ["Soybean Meal"]

    def test_search_is_case_insensitive(
        self, importer: IngredientCatalogImporter, catalog_csv: Path
    ) -> None:
        ingredients = importer.load(catalog_csv)

        filtered = importer.filter(ingredients, search="MEAL")

        assert [i.name for i in filtered] == ["Soybean Meal"]

    def test_filters_combine(self, importer: IngredientCatalogImporter, catalog_csv: Path) -> None:
        ingredients = importer.load(catalog_csv)

        assert importer.filter(ingredients, category="Energy Source", search="rice") == []

    def test_unknown_category_filter(
        self, importer: IngredientCatalogImporter, catalog_csv: Path
    ) -> None:
        with pytest.raises(ValidationError, match="Unknown ingredient category"):
            importer.filter(importer.load(catalog_csv), category="Vitamins")

    def test_categories_are_distinct_and_sorted(
        self, importer: IngredientCatalogImporter, catalog_csv: Path
    ) -> None:
        categories = importer.categories(importer.load(catalog_csv))

        assert categories == [
            "Energy Source",
            "Medium Source",
            "Mineral Source",
            "Protein Source",
        ]
