"""Enrichment service extracting nutrients from nutrition-data responses."""

from dataclasses import dataclass

from pydantic import ValidationError

from fruit_scan.adapters.nutrition_data_client import NutritionDataClient
from fruit_scan.domain.classification import Label
from fruit_scan.domain.errors import MalformedResponseError, PreconditionError
from fruit_scan.domain.nutrition import (
    Nutrient,
    NutrientAmount,
    NutrientPayload,
    NutrientSet,
    NutritionDataResponse,
)


@dataclass
class EnrichmentService:
    """Looks up the nutrient profile of one unit of a labelled fruit."""

    client: NutritionDataClient
    quantity: int = 1

    async def enrich(self, label: Label) -> NutrientSet:
        """Fetch nutrients for a label, keeping only tracked nutrients."""
        if not label or not label.strip():
            raise PreconditionError("Nutrition lookup needs a non-empty label")
        raw = await self.client.nutrition_data(f"{label} {self.quantity}")
        try:
            response = NutritionDataResponse.model_validate(raw)
        except ValidationError as exc:
            raise MalformedResponseError(
                "Nutrition response has no 'totalNutrients' mapping"
            ) from exc
        return _extract_nutrients(response.total_nutrients)


def _extract_nutrients(total_nutrients: dict[str, object]) -> NutrientSet:
    """Pick tracked nutrients out of a ``totalNutrients`` mapping."""
    amounts: dict[Nutrient, NutrientAmount] = {}
    for code, entry in total_nutrients.items():
        nutrient = Nutrient.from_code(code)
        if nutrient is None:
            continue
        try:
            payload = NutrientPayload.model_validate(entry)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Nutrient {code} lacks a numeric quantity and unit"
            ) from exc
        amounts[nutrient] = NutrientAmount(
            quantity=float(payload.quantity), unit=payload.unit
        )
    return NutrientSet(amounts)
