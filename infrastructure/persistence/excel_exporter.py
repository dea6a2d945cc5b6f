"""Excel export functionality.

Exports the views of a calculated formulation to Excel with formatting.
"""

from pathlib import Path
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from domain.exceptions import ExportError
from domain.models import FormulationResult

HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")


class ExcelExporter:
    """Export formulations to Excel format."""

    def export_formulation(
        self,
        result: FormulationResult,
        output_path: Path | str,
    ) -> None:
        """Export mix table, nutrient summary and cost analysis to Excel.

        Args:
            result: Calculated formulation
            output_path: Path to save Excel file

        Raises:
            ExportError: If export fails
        """
        try:
            wb = Workbook()
            wb.remove(wb.active)  # Remove default sheet

            self._create_mix_sheet(wb, result)
            self._create_nutrients_sheet(wb, result)
            self._create_cost_sheet(wb, result)

            wb.save(output_path)

        except Exception as exc:
            raise ExportError(f"Failed to export to Excel: {exc}") from exc

    def _create_mix_sheet(self, wb: Workbook, result: FormulationResult) -> None:
        ws = wb.create_sheet("Feed Mix")

        headers = ["Ingredient", "Percentage", "Amount (kg)", "Price/kg", "Total Cost", "Type"]
        self._write_headers(ws, headers)

        for row in result.mix_table:
            kind = "Fixed" if row.is_fixed else "Supplement" if row.is_supplement else "Main"
            ws.append(
                [
                    row.ingredient,
                    float(row.percentage),
                    float(row.amount_kg),
                    float(row.price_per_kg),
                    float(row.total_cost),
                    kind,
                ]
            )

        # Total row
        ws.append(
            [
                "TOTAL",
                float(sum(row.percentage for row in result.mix_table)),
                float(sum(row.amount_kg for row in result.mix_table)),
                "",
                float(result.cost_analysis.total_feed_cost),
                "",
            ]
        )
        for cell in ws[ws.max_row]:
            cell.font = Font(bold=True)

        self._autosize(ws, max_width=50)

    def _create_nutrients_sheet(self, wb: Workbook, result: FormulationResult) -> None:
        ws = wb.create_sheet("Nutrients")

        self._write_headers(ws, ["Nutrient", "Required", "Achieved"])
        for row in result.nutrient_summary:
            ws.append([row.name, float(row.required), float(row.achieved)])

        self._autosize(ws, max_width=30)

    def _create_cost_sheet(self, wb: Workbook, result: FormulationResult) -> None:
        ws = wb.create_sheet("Cost Analysis")

        analysis = result.cost_analysis
        self._write_headers(ws, ["Item", "Value"])
        ws.append(["Total Feed Cost", float(analysis.total_feed_cost)])
        ws.append(["Cost per kg", float(analysis.cost_per_kg)])
        ws.append(["Batch Weight (kg)", float(analysis.batch_weight_kg)])

        self._autosize(ws, max_width=30)

    def _write_headers(self, ws: Worksheet, headers: Sequence[str]) -> None:
        ws.append(list(headers))
        for col_num, _ in enumerate(headers, 1):
            cell = ws.cell(1, col_num)
            cell.fill = HEADER_FILL
            cell.alignment = Alignment(horizontal="center", vertical="center")

    def _autosize(self, ws: Worksheet, max_width: int) -> None:
        for column in ws.columns:
            max_length = 0
            column_letter = get_column_letter(column[0].column)
            for cell in column:
                if cell.value:
                    max_length = max(max_length, len(str(cell.value)))
            ws.column_dimensions[column_letter].width = min(max_length + 2, max_width)
