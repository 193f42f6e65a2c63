from dataclasses import dataclass

from fantasy_football_rankings.domain.player import Category


@dataclass(frozen=True)
class CategoryExpectation:
    max_rank: int
    typical_count: int
    min_points: float
    max_points: float


CATEGORY_EXPECTATIONS: dict[Category, CategoryExpectation] = {
    Category.QB: CategoryExpectation(max_rank=32, typical_count=24, min_points=200, max_points=400),
    Category.RB: CategoryExpectation(max_rank=80, typical_count=60, min_points=100, max_points=350),
    Category.WR: CategoryExpectation(max_rank=100, typical_count=80, min_points=80, max_points=320),
    Category.TE: CategoryExpectation(max_rank=32, typical_count=24, min_points=60, max_points=180),
    Category.K: CategoryExpectation(max_rank=32, typical_count=20, min_points=80, max_points=150),
    Category.DST: CategoryExpectation(max_rank=32, typical_count=20, min_points=80, max_points=200),
    Category.FLEX: CategoryExpectation(max_rank=200, typical_count=150, min_points=50, max_points=350),
    Category.OVERALL: CategoryExpectation(max_rank=300, typical_count=200, min_points=50, max_points=400),
}

VALID_TEAMS: frozenset[str] = frozenset(
    {
        "ARI", "ATL", "BAL", "BUF", "CAR", "CHI", "CIN", "CLE",
        "DAL", "DEN", "DET", "GB", "HOU", "IND", "JAX", "KC",
        "LV", "LAC", "LAR", "MIA", "MIN", "NE", "NO", "NYG",
        "NYJ", "PHI", "PIT", "SF", "SEA", "TB", "TEN", "WAS",
        "FA",
    }
)  # fmt: skip
