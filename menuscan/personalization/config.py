from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MatchTier:
    min_score: int
    label: str
    color: str


def _default_tiers() -> tuple[MatchTier, ...]:
    return (
        MatchTier(90, "You'll love this!", "#4CAF50"),
        MatchTier(70, "Worth trying", "#FFC107"),
        MatchTier(0, "Not your style", "#F44336"),
    )


@dataclass(frozen=True)
class ScoringConfig:
    neutral_score: int = 50
    tiers: tuple[MatchTier, ...] = field(default_factory=_default_tiers)
    favorite_weight: float = 1.5
    # Share of a positive review's attributes blended into the baseline
    like_it_weight: float = 0.3
    love_it_weight: float = 0.4

    def __post_init__(self) -> None:
        if not self.tiers:
            raise ValueError("ScoringConfig needs at least one match tier")


DEFAULT_SCORING_CONFIG = ScoringConfig()
