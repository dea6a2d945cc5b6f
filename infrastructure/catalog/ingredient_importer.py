from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from domain.exceptions import CatalogImportError, ValidationError
from domain.models import IngredientCategory, IngredientProfile
from domain.services.number_parser import parse_decimal

# Normalized header -> IngredientProfile field
COLUMN_ALIASES: Dict[str, str] = {
    "id": "id",
    "ingredientid": "id",
    "name": "name",
    "ingredient": "name",
    "category": "category",
    "crudeprotein": "crude_protein",
    "cp": "crude_protein",
    "energy": "energy",
    "me": "energy",
    "mekcalperkg": "energy",
    "mekcalkg": "energy",
    "calcium": "calcium",
    "ca": "calcium",
    "phosphorus": "phosphorus",
    "availablephosphorus": "phosphorus",
    "lysine": "lysine",
    "methionine": "methionine",
    "fiber": "fiber",
    "fibre": "fiber",
    "costperkg": "cost_per_kg",
    "cost": "cost_per_kg",
    "price": "cost_per_kg",
}

NUMERIC_FIELDS = (
    "crude_protein",
    "energy",
    "calcium",
    "phosphorus",
    "lysine",
    "methionine",
    "fiber",
    "cost_per_kg",
)

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}


def normalize_header(label: Any) -> str:
    return "".join(ch for ch in str(label).lower() if ch.isalnum())


class IngredientCatalogImporter:
    """Read ingredient profiles from CSV or Excel catalog files."""

    def load(self, path: Path | str) -> List[IngredientProfile]:
        """Parse every row of a catalog file, in file order.

        Raises:
            CatalogImportError: If the file cannot be read or a row is invalid
        """
        df = self._read(Path(path))

        columns: Dict[str, str] = {}
        for column in df.columns:
            field = COLUMN_ALIASES.get(normalize_header(column))
            if field and field not in columns.values():
                columns[column] = field

        missing = {"name", "category"} - set(columns.values())
        if missing:
            raise CatalogImportError(
                f"Catalog {Path(path).name} is missing columns: {', '.join(sorted(missing))}"
            )

        ingredients: List[IngredientProfile] = []
        for index, raw in enumerate(df.to_dict(orient="records"), start=2):
            row = {field: raw[column] for column, field in columns.items()}
            if self._blank(row.get("name")):
                continue
            ingredients.append(self._row_to_ingredient(row, index))

        logging.debug("Loaded %d ingredients from %s", len(ingredients), path)
        return ingredients

    def filter(
        self,
        ingredients: Iterable[IngredientProfile],
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[IngredientProfile]:
        """Keep ingredients of a category and/or whose name contains ``search``."""
        wanted: Optional[IngredientCategory] = None
        if category:
            try:
                wanted = IngredientCategory.from_label(category)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
        needle = (search or "").strip().lower()

        return [
            ing
            for ing in ingredients
            if (wanted is None or ing.category is wanted)
            and (not needle or needle in ing.name.lower())
        ]

    def categories(self, ingredients: Iterable[IngredientProfile]) -> List[str]:
        """Distinct category labels, sorted."""
        return sorted({ing.category.value for ing in ingredients})

    def _read(self, path: Path) -> pd.DataFrame:
        if not path.exists():
            raise CatalogImportError(f"Catalog file not found: {path}")

        suffix = path.suffix.lower()
        try:
            if suffix == ".csv":
                return pd.read_csv(path)
            if suffix in EXCEL_SUFFIXES:
                return pd.read_excel(path, sheet_name=0)
        except Exception as exc:  # noqa: BLE001
            raise CatalogImportError(f"Could not read catalog {path.name}: {exc}") from exc

        raise CatalogImportError(f"Unsupported catalog format: {path.suffix or path.name}")

    def _row_to_ingredient(self, row: Dict[str, Any], line: int) -> IngredientProfile:
        name = str(row["name"]).strip()
        raw_id = row.get("id")
        ingredient_id = name if self._blank(raw_id) else self._id_text(raw_id)

        try:
            category = IngredientCategory.from_label(str(row["category"]))
        except ValueError as exc:
            raise CatalogImportError(f"Row {line} ({name}): {exc}") from exc

        values: Dict[str, Decimal] = {}
        for field in NUMERIC_FIELDS:
            raw = row.get(field)
            if self._blank(raw):
                values[field] = Decimal("0")
                continue
            value = parse_decimal(raw)
            if value is None:
                raise CatalogImportError(f"Row {line} ({name}): invalid {field} value {raw!r}")
            values[field] = value

        try:
            return IngredientProfile(id=ingredient_id, name=name, category=category, **values)
        except ValueError as exc:
            raise CatalogImportError(f"Row {line} ({name}): {exc}") from exc

    @staticmethod
    def _blank(value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, str):
            return not value.strip()
        return bool(pd.isna(value))

    @staticmethod
    def _id_text(value: Any) -> str:
        # Numeric ids come back from pandas as floats
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value).strip()
