"""Domain models.

Core business entities of a feed formulation. Every model is an
immutable value object: the calculation builds new objects instead of
editing existing ones.

Nutrient percentages and parts use ``Decimal``. Energy is expressed in
kcal/kg. A mix is measured in parts, where 100 parts are one whole batch.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from domain.services.number_parser import round_decimal

NUTRIENT_FIELDS = (
    "crude_protein",
    "energy",
    "calcium",
    "phosphorus",
    "lysine",
    "methionine",
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class IngredientCategory(str, Enum):
    """Category tag of a catalog ingredient."""

    ENERGY_SOURCE = "Energy Source"
    PROTEIN_SOURCE = "Protein Source"
    MEDIUM_SOURCE = "Medium Source"
    MINERAL_SOURCE = "Mineral Source"

    @classmethod
    def from_label(cls, label: str) -> "IngredientCategory":
        """Resolve a category from its display label or enum spelling.

        Accepts "Energy Source", "EnergySource", "energy_source" and
        "ENERGY_SOURCE" alike.
        """
        key = "".join(ch for ch in str(label).lower() if ch.isalnum())
        for category in cls:
            if key in (category.value.lower().replace(" ", ""), category.name.lower().replace("_", "")):
                return category
        raise ValueError(f"Unknown ingredient category: {label!r}")


@dataclass(frozen=True)
class NutrientProfile:
    """Six tracked nutrients, as concentrations or as absolute amounts."""

    crude_protein: Decimal = ZERO
    energy: Decimal = ZERO
    calcium: Decimal = ZERO
    phosphorus: Decimal = ZERO
    lysine: Decimal = ZERO
    methionine: Decimal = ZERO

    def get(self, name: str) -> Decimal:
        if name not in NUTRIENT_FIELDS:
            raise KeyError(f"Unknown nutrient: {name}")
        return getattr(self, name)

    def contribution(self, parts: Decimal) -> "NutrientProfile":
        """Return what ``parts`` of a 100-part mix contribute (linear)."""
        return NutrientProfile(
            **{name: parts * self.get(name) / HUNDRED for name in NUTRIENT_FIELDS}
        )

    def plus(self, other: "NutrientProfile") -> "NutrientProfile":
        return NutrientProfile(
            **{name: self.get(name) + other.get(name) for name in NUTRIENT_FIELDS}
        )

    def minus(self, other: "NutrientProfile") -> "NutrientProfile":
        return NutrientProfile(
            **{name: self.get(name) - other.get(name) for name in NUTRIENT_FIELDS}
        )

    def rounded(self, places: int, energy_places: Optional[int] = None) -> "NutrientProfile":
        values = {}
        for name in NUTRIENT_FIELDS:
            digits = energy_places if name == "energy" and energy_places is not None else places
            values[name] = round_decimal(self.get(name), digits)
        return NutrientProfile(**values)


@dataclass(frozen=True)
class NutrientTarget:
    """Nutrient requirements of one formulation request.

    Crude protein and energy are mandatory for a calculation; the
    remaining nutrients are optional and count as zero when absent.
    """

    crude_protein: Optional[Decimal] = None
    energy_kcal_per_kg: Optional[Decimal] = None
    calcium: Optional[Decimal] = None
    available_phosphorus: Optional[Decimal] = None
    lysine: Optional[Decimal] = None
    methionine: Optional[Decimal] = None

    def as_profile(self) -> NutrientProfile:
        """Map the target onto the mix nutrient names, missing values as zero."""
        return NutrientProfile(
            crude_protein=self.crude_protein or ZERO,
            energy=self.energy_kcal_per_kg or ZERO,
            calcium=self.calcium or ZERO,
            phosphorus=self.available_phosphorus or ZERO,
            lysine=self.lysine or ZERO,
            methionine=self.methionine or ZERO,
        )


@dataclass(frozen=True)
class IngredientProfile:
    """A catalog ingredient with its nutrient composition and price."""

    id: str
    name: str
    category: IngredientCategory
    crude_protein: Decimal = ZERO
    energy: Decimal = ZERO
    calcium: Decimal = ZERO
    phosphorus: Decimal = ZERO
    lysine: Decimal = ZERO
    methionine: Decimal = ZERO
    fiber: Decimal = ZERO
    cost_per_kg: Decimal = ZERO

    def __post_init__(self) -> None:
        """Validate ingredient data."""
        if not self.name:
            raise ValueError("Ingredient name cannot be empty")
        if not isinstance(self.category, IngredientCategory):
            raise ValueError(f"Invalid ingredient category: {self.category!r}")
        for name in NUTRIENT_FIELDS + ("fiber", "cost_per_kg"):
            if getattr(self, name) < 0:
                raise ValueError(f"Ingredient {name} cannot be negative: {getattr(self, name)}")

    @property
    def nutrients(self) -> NutrientProfile:
        return NutrientProfile(**{name: getattr(self, name) for name in NUTRIENT_FIELDS})


@dataclass(frozen=True)
class MixEntry:
    """One line of a feed mix: an ingredient at a number of parts."""

    ingredient_id: str
    name: str
    parts: Decimal
    nutrients: NutrientProfile = field(default_factory=NutrientProfile)
    cost_per_kg: Decimal = ZERO
    is_fixed: bool = False
    is_supplement: bool = False

    @classmethod
    def from_ingredient(
        cls,
        ingredient: IngredientProfile,
        parts: Decimal,
        is_fixed: bool = False,
    ) -> "MixEntry":
        return cls(
            ingredient_id=ingredient.id,
            name=ingredient.name,
            parts=parts,
            nutrients=ingredient.nutrients,
            cost_per_kg=ingredient.cost_per_kg,
            is_fixed=is_fixed,
        )

    @property
    def contribution(self) -> NutrientProfile:
        return self.nutrients.contribution(self.parts)


@dataclass(frozen=True)
class SupplementSpec:
    """A pure supplement and its nutrient purity (percent)."""

    ingredient_id: str
    name: str
    nutrients: NutrientProfile = field(default_factory=NutrientProfile)
    cost_per_kg: Decimal = ZERO

    def to_entry(self, parts: Decimal) -> MixEntry:
        return MixEntry(
            ingredient_id=self.ingredient_id,
            name=self.name,
            parts=parts,
            nutrients=self.nutrients,
            cost_per_kg=self.cost_per_kg,
            is_supplement=True,
        )


@dataclass(frozen=True)
class SupplementTable:
    """Supplements used to close nutrient deficits, in correction order."""

    lysine: SupplementSpec
    methionine: SupplementSpec
    dicalcium_phosphate: SupplementSpec
    calcium_carbonate: SupplementSpec
    energy_oil: SupplementSpec
    premix: SupplementSpec

    @classmethod
    def default(cls) -> "SupplementTable":
        return cls(
            lysine=SupplementSpec(
                ingredient_id="supplement_lysine",
                name="L-Lysine HCl",
                nutrients=NutrientProfile(lysine=Decimal("78")),
            ),
            methionine=SupplementSpec(
                ingredient_id="supplement_methionine",
                name="DL-Methionine",
                nutrients=NutrientProfile(methionine=Decimal("99")),
            ),
            dicalcium_phosphate=SupplementSpec(
                ingredient_id="supplement_dcp",
                name="Dicalcium Phosphate (DCP)",
                nutrients=NutrientProfile(phosphorus=Decimal("20"), calcium=Decimal("21")),
            ),
            calcium_carbonate=SupplementSpec(
                ingredient_id="supplement_caco3",
                name="Calcium Carbonate (CaCO₃)",
                nutrients=NutrientProfile(calcium=Decimal("40")),
            ),
            energy_oil=SupplementSpec(
                ingredient_id="supplement_oil",
                name="Palm Oil",
                nutrients=NutrientProfile(energy=Decimal("7200")),
            ),
            premix=SupplementSpec(
                ingredient_id="supplement_premix",
                name="Salt + Trace Minerals + Vitamins",
            ),
        )


@dataclass(frozen=True)
class CategorizedIngredients:
    """Ingredient pool split by category, keeping input order."""

    energy_sources: tuple[IngredientProfile, ...] = ()
    protein_sources: tuple[IngredientProfile, ...] = ()
    medium_sources: tuple[IngredientProfile, ...] = ()
    all: tuple[IngredientProfile, ...] = ()


@dataclass(frozen=True)
class RemainingNeeds:
    """Nutrients still to be supplied by the balanced main ingredients."""

    remaining_parts: Decimal
    nutrients: NutrientProfile


@dataclass(frozen=True)
class CostSummary:
    cost_per_100_parts: Decimal
    cost_per_kg: Decimal
    total_cost: Decimal
    batch_weight_kg: Decimal


@dataclass(frozen=True)
class MixTableRow:
    ingredient: str
    percentage: Decimal
    amount_kg: Decimal
    price_per_kg: Decimal
    total_cost: Decimal
    is_fixed: bool = False
    is_supplement: bool = False


@dataclass(frozen=True)
class NutrientSummaryRow:
    name: str
    required: Decimal
    achieved: Decimal


@dataclass(frozen=True)
class CostAnalysis:
    total_feed_cost: Decimal
    cost_per_kg: Decimal
    batch_weight_kg: Decimal


@dataclass(frozen=True)
class FormulationLabels:
    """Descriptive context of a request, carried through untouched."""

    species: Optional[str] = None
    subspecies: Optional[str] = None
    animal_type: Optional[str] = None
    phase: Optional[str] = None


@dataclass(frozen=True)
class FormulationRequest:
    """Inputs of one calculation, as supplied by the catalog services."""

    batch_weight_kg: Optional[Decimal]
    nutrient_target: Optional[NutrientTarget]
    ingredients: tuple[IngredientProfile, ...] = ()
    labels: FormulationLabels = field(default_factory=FormulationLabels)


@dataclass(frozen=True)
class FormulationResult:
    """Outcome of one calculation with its three presentation views."""

    batch_weight_kg: Decimal
    ingredients: tuple[MixEntry, ...]
    required: NutrientTarget
    provided: NutrientProfile
    deficits: NutrientProfile
    cost: CostSummary
    mix_table: tuple[MixTableRow, ...]
    nutrient_summary: tuple[NutrientSummaryRow, ...]
    cost_analysis: CostAnalysis
    labels: FormulationLabels = field(default_factory=FormulationLabels)

    @property
    def total_parts(self) -> Decimal:
        return sum((entry.parts for entry in self.ingredients), ZERO)

    @property
    def supplement_parts(self) -> Decimal:
        return sum(
            (entry.parts for entry in self.ingredients if entry.is_supplement),
            ZERO,
        )

    def get_fixed_entry(self) -> Optional[MixEntry]:
        for entry in self.ingredients:
            if entry.is_fixed:
                return entry
        return None

    def get_supplements(self) -> list[MixEntry]:
        return [entry for entry in self.ingredients if entry.is_supplement]


@dataclass(frozen=True)
class FormulationRecord:
    """A stored formulation."""

    id: str
    created_at: datetime
    result: FormulationResult
