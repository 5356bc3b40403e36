from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PreferenceSource(str, Enum):
    baseline = "baseline"
    reviews = "reviews"


class UserPreferenceVector(BaseModel):
    model_config = ConfigDict(frozen=True)

    avg_size: float = Field(..., ge=0.0, le=10.0)
    avg_body: float = Field(..., ge=0.0, le=10.0)
    avg_sweet_brininess: float = Field(..., ge=0.0, le=10.0)
    avg_flavorfulness: float = Field(..., ge=0.0, le=10.0)
    avg_creaminess: float = Field(..., ge=0.0, le=10.0)
    source: PreferenceSource | None = None

    def as_tuple(self) -> tuple[float, ...]:
        return (
            self.avg_size,
            self.avg_body,
            self.avg_sweet_brininess,
            self.avg_flavorfulness,
            self.avg_creaminess,
        )


class ReviewRating(str, Enum):
    LOVE_IT = "LOVE_IT"
    LIKE_IT = "LIKE_IT"
    OKAY = "OKAY"
    MEH = "MEH"


POSITIVE_RATINGS = frozenset({ReviewRating.LOVE_IT, ReviewRating.LIKE_IT})


class ReviewSignal(BaseModel):
    """A user's review of one catalog item, with optional tasting notes."""

    item_id: str
    rating: ReviewRating
    size: float | None = Field(default=None, ge=1, le=10)
    body: float | None = Field(default=None, ge=1, le=10)
    sweet_brininess: float | None = Field(default=None, ge=1, le=10)
    flavorfulness: float | None = Field(default=None, ge=1, le=10)
    creaminess: float | None = Field(default=None, ge=1, le=10)

    @property
    def has_all_attributes(self) -> bool:
        return None not in (
            self.size, self.body, self.sweet_brininess,
            self.flavorfulness, self.creaminess,
        )


class BaselineProfile(BaseModel):
    """Ideal attributes the user entered before reviewing anything."""

    size: float | None = Field(default=None, ge=1, le=10)
    body: float | None = Field(default=None, ge=1, le=10)
    sweet_brininess: float | None = Field(default=None, ge=1, le=10)
    flavorfulness: float | None = Field(default=None, ge=1, le=10)
    creaminess: float | None = Field(default=None, ge=1, le=10)

    @property
    def is_complete(self) -> bool:
        return None not in (
            self.size, self.body, self.sweet_brininess,
            self.flavorfulness, self.creaminess,
        )

    @property
    def is_empty(self) -> bool:
        return all(
            v is None for v in (
                self.size, self.body, self.sweet_brininess,
                self.flavorfulness, self.creaminess,
            )
        )
