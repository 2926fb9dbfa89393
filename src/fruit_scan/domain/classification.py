"""Classification domain models and response schema."""

from typing import NewType

from pydantic import BaseModel, ConfigDict, StrictStr, field_validator

Label = NewType("Label", str)


def normalize_label(raw: str) -> Label:
    """Normalize a classifier label; raise ValueError when it is blank."""
    cleaned = " ".join(raw.split()).lower()
    if not cleaned:
        raise ValueError("label must not be empty")
    return Label(cleaned)


class ClassificationResponse(BaseModel):
    """Expected body of a successful ``/predict`` call."""

    model_config = ConfigDict(extra="ignore")

    fruit: StrictStr

    @field_validator("fruit")
    @classmethod
    def _fruit_not_blank(cls, value: str) -> str:
        return normalize_label(value)
