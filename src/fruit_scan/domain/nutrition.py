"""Nutrition domain models and response schemas."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr

UNKNOWN = "unknown"


class Nutrient(StrEnum):
    """Nutrients tracked by the pipeline."""

    ENERGY = "energy"
    PROTEIN = "protein"
    CARBOHYDRATE = "carbohydrate"
    FAT = "fat"
    FIBER = "fiber"
    SUGAR = "sugar"

    @property
    def code(self) -> str:
        """Nutrient code used by the nutrition-data service."""
        return _CODES[self]

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_code(cls, code: str) -> "Nutrient | None":
        """Map a service nutrient code to a tracked nutrient, if recognized."""
        return _BY_CODE.get(code)


_CODES = {
    Nutrient.ENERGY: "ENERC_KCAL",
    Nutrient.PROTEIN: "PROCNT",
    Nutrient.CARBOHYDRATE: "CHOCDF",
    Nutrient.FAT: "FAT",
    Nutrient.FIBER: "FIBTG",
    Nutrient.SUGAR: "SUGAR",
}
_BY_CODE = {code: nutrient for nutrient, code in _CODES.items()}
_DISPLAY_NAMES = {
    Nutrient.ENERGY: "Calories",
    Nutrient.PROTEIN: "Protein",
    Nutrient.CARBOHYDRATE: "Carbs",
    Nutrient.FAT: "Fat",
    Nutrient.FIBER: "Fiber",
    Nutrient.SUGAR: "Sugar",
}


@dataclass(frozen=True)
class NutrientAmount:
    """Quantity of a nutrient with its unit."""

    quantity: float
    unit: str

    def format(self) -> str:
        """Render with one decimal place, e.g. ``52.0 kcal``."""
        return f"{self.quantity:.1f} {self.unit}"


@dataclass(frozen=True)
class NutrientSet(Mapping[Nutrient, NutrientAmount]):
    """Sparse, read-only mapping of nutrients to amounts."""

    amounts: Mapping[Nutrient, NutrientAmount] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "amounts", MappingProxyType(dict(self.amounts)))

    def __getitem__(self, key: Nutrient) -> NutrientAmount:
        return self.amounts[key]

    def __iter__(self) -> Iterator[Nutrient]:
        return iter(self.amounts)

    def __len__(self) -> int:
        return len(self.amounts)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self.amounts) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self.amounts.items()))

    def describe(self, nutrient: Nutrient) -> str:
        """Render a nutrient amount, or ``unknown`` when it is absent."""
        amount = self.amounts.get(nutrient)
        return amount.format() if amount is not None else UNKNOWN


class NutrientPayload(BaseModel):
    """Single nutrient entry in a nutrition-data response."""

    model_config = ConfigDict(extra="ignore")

    quantity: StrictFloat | StrictInt
    unit: StrictStr


class NutritionDataResponse(BaseModel):
    """Subset of the nutrition-data response the pipeline relies on."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    total_nutrients: dict[str, object] = Field(alias="totalNutrients")
