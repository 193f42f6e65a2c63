from dataclasses import dataclass, field
from enum import StrEnum


class Category(StrEnum):
    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"
    K = "K"
    DST = "DST"
    FLEX = "FLEX"
    OVERALL = "OVERALL"

    @property
    def is_concrete(self) -> bool:
        return self not in (Category.FLEX, Category.OVERALL)

    @classmethod
    def parse(cls, raw: str) -> "Category":
        key = raw.strip().upper()
        key = _CATEGORY_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown category: {raw!r}") from None


_CATEGORY_ALIASES = {"DEF": "DST", "D/ST": "DST"}

CONCRETE_CATEGORIES: tuple[Category, ...] = (
    Category.QB,
    Category.RB,
    Category.WR,
    Category.TE,
    Category.K,
    Category.DST,
)

FLEX_ELIGIBLE: frozenset[Category] = frozenset({Category.RB, Category.WR, Category.TE})


class ScoringFormat(StrEnum):
    STANDARD = "standard"
    PPR = "ppr"
    HALF_PPR = "half-ppr"

    @classmethod
    def parse(cls, raw: str) -> "ScoringFormat":
        key = raw.strip().lower().replace("_", "-")
        key = _FORMAT_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown scoring format: {raw!r}") from None


_FORMAT_ALIASES = {"std": "standard", "half": "half-ppr", "half-point-ppr": "half-ppr"}


@dataclass(frozen=True)
class PlayerMetadata:
    bye_week: int | None = None
    injury_status: str | None = None
    consensus_level: str | None = None


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    team: str
    category: Category
    average_rank: float
    standard_deviation: float
    projected_points: float
    tier: int | None = None
    expert_ranks: tuple[int, ...] = ()
    min_rank: float | None = None
    max_rank: float | None = None
    metadata: PlayerMetadata = field(default_factory=PlayerMetadata)
