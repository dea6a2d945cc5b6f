"""JSON persistence for formulations.

Stores each calculated formulation as one JSON file named after its id.
"""

import json
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

from domain.exceptions import FormulationNotFoundError, InvalidFormulationFileError
from domain.models import (
    NUTRIENT_FIELDS,
    CostAnalysis,
    CostSummary,
    FormulationLabels,
    FormulationRecord,
    FormulationResult,
    MixEntry,
    MixTableRow,
    NutrientProfile,
    NutrientSummaryRow,
    NutrientTarget,
)

TARGET_FIELDS = (
    "crude_protein",
    "energy_kcal_per_kg",
    "calcium",
    "available_phosphorus",
    "lysine",
    "methionine",
)


def _dec(value: Any) -> Decimal:
    return Decimal(str(value))


def _opt_dec(value: Any) -> Optional[Decimal]:
    return None if value is None else Decimal(str(value))


def _opt_str(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


class JSONFormulationRepository:
    """Repository for persisting formulations as JSON files."""

    def __init__(self, base_directory: str | Path = "saves") -> None:
        """Initialize repository.

        Args:
            base_directory: Directory holding one file per formulation
        """
        self._base_dir = Path(base_directory)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    def save(
        self,
        result: FormulationResult,
        created_at: Optional[datetime] = None,
    ) -> FormulationRecord:
        """Store a formulation under a new id.

        Args:
            result: Formulation to store
            created_at: Creation time (defaults to now, UTC)

        Returns:
            The stored record
        """
        record = FormulationRecord(
            id=uuid.uuid4().hex,
            created_at=created_at or datetime.now(timezone.utc),
            result=result,
        )

        data = self._record_to_dict(record)
        with open(self._path_for(record.id), "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        return record

    def load(self, formulation_id: str) -> FormulationRecord:
        """Load a stored formulation.

        Raises:
            FormulationNotFoundError: If no formulation has this id
            InvalidFormulationFileError: If the stored file is malformed
        """
        file_path = self._path_for(formulation_id)

        if not file_path.exists():
            raise FormulationNotFoundError(f"Feed formulation not found: {formulation_id}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)

            return self._dict_to_record(data)

        except (
            json.JSONDecodeError,
            AttributeError,
            KeyError,
            ValueError,
            TypeError,
            ArithmeticError,
        ) as exc:
            raise InvalidFormulationFileError(
                f"Invalid formulation file: {file_path.name}"
            ) from exc

    def list_ids(self) -> List[str]:
        if not self._base_dir.exists():
            return []

        return sorted(f.stem for f in self._base_dir.glob("*.json"))

    def list_records(self) -> List[FormulationRecord]:
        """All stored formulations, newest first."""
        records = [self.load(formulation_id) for formulation_id in self.list_ids()]
        return sorted(records, key=lambda record: record.created_at, reverse=True)

    def delete(self, formulation_id: str) -> None:
        """Delete a stored formulation.

        Raises:
            FormulationNotFoundError: If no formulation has this id
        """
        file_path = self._path_for(formulation_id)

        if not file_path.exists():
            raise FormulationNotFoundError(f"Feed formulation not found: {formulation_id}")

        file_path.unlink()

    def _path_for(self, formulation_id: str) -> Path:
        # Ids are bare names; anything path-like cannot match a stored file
        name = Path(str(formulation_id)).name
        return self._base_dir / f"{name}.json"

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def _record_to_dict(self, record: FormulationRecord) -> Dict[str, Any]:
        """Convert FormulationRecord to dictionary."""
        result = record.result
        return {
            "id": record.id,
            "created_at": record.created_at.isoformat(),
            "batch_weight_kg": str(result.batch_weight_kg),
            "labels": {
                "species": result.labels.species,
                "subspecies": result.labels.subspecies,
                "animal_type": result.labels.animal_type,
                "phase": result.labels.phase,
            },
            "ingredients": [
                {
                    "ingredient_id": entry.ingredient_id,
                    "name": entry.name,
                    "parts": str(entry.parts),
                    "nutrients": self._profile_to_dict(entry.nutrients),
                    "cost_per_kg": str(entry.cost_per_kg),
                    "is_fixed": entry.is_fixed,
                    "is_supplement": entry.is_supplement,
                }
                for entry in result.ingredients
            ],
            "required": {
                name: _opt_str(getattr(result.required, name)) for name in TARGET_FIELDS
            },
            "provided": self._profile_to_dict(result.provided),
            "deficits": self._profile_to_dict(result.deficits),
            "cost": {
                "cost_per_100_parts": str(result.cost.cost_per_100_parts),
                "cost_per_kg": str(result.cost.cost_per_kg),
                "total_cost": str(result.cost.total_cost),
            },
            "mix_table": [
                {
                    "ingredient": row.ingredient,
                    "percentage": str(row.percentage),
                    "amount_kg": str(row.amount_kg),
                    "price_per_kg": str(row.price_per_kg),
                    "total_cost": str(row.total_cost),
                    "is_fixed": row.is_fixed,
                    "is_supplement": row.is_supplement,
                }
                for row in result.mix_table
            ],
            "nutrient_summary": [
                {"name": row.name, "required": str(row.required), "achieved": str(row.achieved)}
                for row in result.nutrient_summary
            ],
            "cost_analysis": {
                "total_feed_cost": str(result.cost_analysis.total_feed_cost),
                "cost_per_kg": str(result.cost_analysis.cost_per_kg),
            },
        }

    def _dict_to_record(self, data: Dict[str, Any]) -> FormulationRecord:
        """Convert dictionary to FormulationRecord."""
        batch_weight = _dec(data["batch_weight_kg"])
        labels = data.get("labels") or {}
        cost = data["cost"]
        analysis = data["cost_analysis"]

        result = FormulationResult(
            batch_weight_kg=batch_weight,
            ingredients=tuple(
                MixEntry(
                    ingredient_id=item["ingredient_id"],
                    name=item["name"],
                    parts=_dec(item["parts"]),
                    nutrients=self._dict_to_profile(item.get("nutrients", {})),
                    cost_per_kg=_dec(item.get("cost_per_kg", "0")),
                    is_fixed=item.get("is_fixed", False),
                    is_supplement=item.get("is_supplement", False),
                )
                for item in data.get("ingredients", [])
            ),
            required=NutrientTarget(
                **{name: _opt_dec(data["required"].get(name)) for name in TARGET_FIELDS}
            ),
            provided=self._dict_to_profile(data["provided"]),
            deficits=self._dict_to_profile(data["deficits"]),
            cost=CostSummary(
                cost_per_100_parts=_dec(cost["cost_per_100_parts"]),
                cost_per_kg=_dec(cost["cost_per_kg"]),
                total_cost=_dec(cost["total_cost"]),
                batch_weight_kg=batch_weight,
            ),
            mix_table=tuple(
                MixTableRow(
                    ingredient=row["ingredient"],
                    percentage=_dec(row["percentage"]),
                    amount_kg=_dec(row["amount_kg"]),
                    price_per_kg=_dec(row["price_per_kg"]),
                    total_cost=_dec(row["total_cost"]),
                    is_fixed=row.get("is_fixed", False),
                    is_supplement=row.get("is_supplement", False),
                )
                for row in data.get("mix_table", [])
            ),
            nutrient_summary=tuple(
                NutrientSummaryRow(
                    name=row["name"],
                    required=_dec(row["required"]),
                    achieved=_dec(row["achieved"]),
                )
                for row in data.get("nutrient_summary", [])
            ),
            cost_analysis=CostAnalysis(
                total_feed_cost=_dec(analysis["total_feed_cost"]),
                cost_per_kg=_dec(analysis["cost_per_kg"]),
                batch_weight_kg=batch_weight,
            ),
            labels=FormulationLabels(
                species=labels.get("species"),
                subspecies=labels.get("subspecies"),
                animal_type=labels.get("animal_type"),
                phase=labels.get("phase"),
            ),
        )

        return FormulationRecord(
            id=data["id"],
            created_at=datetime.fromisoformat(data["created_at"]),
            result=result,
        )

    @staticmethod
    def _profile_to_dict(profile: NutrientProfile) -> Dict[str, str]:
        return {name: str(profile.get(name)) for name in NUTRIENT_FIELDS}

    @staticmethod
    def _dict_to_profile(data: Dict[str, Any]) -> NutrientProfile:
        return NutrientProfile(
            **{name: _dec(data.get(name, "0")) for name in NUTRIENT_FIELDS}
        )
