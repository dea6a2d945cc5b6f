"""Tests for ExcelExporter."""

from pathlib import Path

import pytest
from openpyxl import load_workbook

from domain.exceptions import ExportError
from domain.models import FormulationResult
from infrastructure.persistence.excel_exporter import ExcelExporter


@pytest.fixture
def exporter() -> ExcelExporter:
    return ExcelExporter()


def test_writes_three_sheets(
    exporter: ExcelExporter, calculated: FormulationResult, tmp_path: Path
) -> None:
    output = tmp_path / "mix.xlsx"

    exporter.export_formulation(calculated, output)

    wb = load_workbook(output)
    assert wb.sheetnames == ["Feed Mix", "Nutrients", "Cost Analysis"]


def test_mix_sheet_rows(
    exporter: ExcelExporter, calculated: FormulationResult, tmp_path: Path
) -> None:
    output = tmp_path / "mix.xlsx"
    exporter.export_formulation(calculated, output)

    ws = load_workbook(output)["Feed Mix"]
    rows = list(ws.iter_rows(values_only=True))

    assert rows[0][0] == "Ingredient"
    # Header, one row per entry, total
    assert len(rows) == len(calculated.mix_table) + 2
    assert rows[1][0] == "Soybean Meal"
    assert rows[1][5] == "Main"
    assert rows[-2][5] == "Supplement"
    assert rows[-1][0] == "TOTAL"
    assert rows[-1][4] == pytest.approx(float(calculated.cost_analysis.total_feed_cost))


def test_nutrient_and_cost_sheets(
    exporter: ExcelExporter, calculated: FormulationResult, tmp_path: Path
) -> None:
    output = tmp_path / "mix.xlsx"
    exporter.export_formulation(calculated, output)

    wb = load_workbook(output)
    nutrients = list(wb["Nutrients"].iter_rows(values_only=True))
    cost = list(wb["Cost Analysis"].iter_rows(values_only=True))

    assert len(nutrients) == len(calculated.nutrient_summary) + 1
    assert nutrients[-1][0] == "Salt (%)"
    assert cost[1][0] == "Total Feed Cost"
    assert cost[1][1] == pytest.approx(2528.75)
    assert cost[3][1] == pytest.approx(100.0)


def test_unwritable_path_raises_export_error(
    exporter: ExcelExporter, calculated: FormulationResult, tmp_path: Path
) -> None:
    with pytest.raises(ExportError, match="Failed to export"):
        exporter.export_formulation(calculated, tmp_path / "missing" / "mix.xlsx")
