from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

ATTRIBUTE_NAMES: tuple[str, ...] = (
    "size",
    "body",
    "sweet_brininess",
    "flavorfulness",
    "creaminess",
)


class CatalogItem(BaseModel):
    """A known menu item with its tasting profile on the 1-10 scale."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    species: str = ""
    origin: str = ""
    standout_notes: str | None = None

    size: float = Field(..., ge=1, le=10)
    body: float = Field(..., ge=1, le=10)
    sweet_brininess: float = Field(..., ge=1, le=10)
    flavorfulness: float = Field(..., ge=1, le=10)
    creaminess: float = Field(..., ge=1, le=10)

    # Community-observed values, absent until the item has reviews
    avg_size: float | None = Field(default=None, ge=1, le=10)
    avg_body: float | None = Field(default=None, ge=1, le=10)
    avg_sweet_brininess: float | None = Field(default=None, ge=1, le=10)
    avg_flavorfulness: float | None = Field(default=None, ge=1, le=10)
    avg_creaminess: float | None = Field(default=None, ge=1, le=10)

    total_reviews: int = Field(default=0, ge=0)

    def effective_attributes(self) -> tuple[float, ...]:
        """Return the five attributes, preferring community averages."""
        values: list[float] = []
        for name in ATTRIBUTE_NAMES:
            avg = getattr(self, f"avg_{name}")
            values.append(avg if avg is not None else getattr(self, name))
        return tuple(values)


class CatalogItemOut(BaseModel):
    id: str
    name: str
    species: str
    origin: str
    standout_notes: str | None = None
