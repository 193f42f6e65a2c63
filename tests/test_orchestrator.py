import pytest
import pytest_asyncio

from fantasy_football_rankings.cache.keys import overall_key, player_key
from fantasy_football_rankings.cache.store import UnifiedCache
from fantasy_football_rankings.domain.fetch_result import SourceTag
from fantasy_football_rankings.domain.player import CONCRETE_CATEGORIES, Category, ScoringFormat
from fantasy_football_rankings.orchestrator import FetchOptions, Orchestrator, attempt_source
from fantasy_football_rankings.result import Err, Ok
from fantasy_football_rankings.sources.errors import (
    SourceConfigurationError,
    SourceError,
    SourceNetworkError,
    SourceParseError,
    SourceTimeoutError,
)
from fantasy_football_rankings.sources.registry import SourceRegistry
from fantasy_football_rankings.sources.sample import load_sample_players
from tests.fakes.sources import FakeSink, FakeSource, PerCategorySource, make_players


def _registry(*sources: FakeSource | PerCategorySource) -> SourceRegistry:
    registry = SourceRegistry()
    for source in sources:
        registry.register(source)
    return registry


class _ExplodingValidator:
    def validate(self, *args: object, **kwargs: object) -> None:
        raise RuntimeError("validator bug")


@pytest.fixture
def cache() -> UnifiedCache:
    return UnifiedCache(default_ttl=900, max_entries=100)


class TestAttemptSource:
    @pytest.mark.asyncio
    async def test_success(self) -> None:
        source = FakeSource(SourceTag.PRIMARY_API, make_players(3))
        outcome = await attempt_source(source, Category.WR, ScoringFormat.PPR, 1.0)
        assert isinstance(outcome, Ok)
        assert len(outcome.value) == 3

    @pytest.mark.asyncio
    async def test_source_error_passes_through(self) -> None:
        error = SourceConfigurationError("no key")
        source = FakeSource(SourceTag.PRIMARY_API, error=error)
        outcome = await attempt_source(source, Category.WR, ScoringFormat.PPR, 1.0)
        assert isinstance(outcome, Err)
        assert outcome.error is error

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        source = FakeSource(SourceTag.PRIMARY_API, make_players(3), delay=1.0)
        outcome = await attempt_source(source, Category.WR, ScoringFormat.PPR, 0.01)
        assert isinstance(outcome, Err)
        assert isinstance(outcome.error, SourceTimeoutError)

    @pytest.mark.asyncio
    async def test_unexpected_exception_wrapped(self) -> None:
        source = FakeSource(SourceTag.PRIMARY_API, error=RuntimeError("boom"))
        outcome = await attempt_source(source, Category.WR, ScoringFormat.PPR, 1.0)
        assert isinstance(outcome, Err)
        assert type(outcome.error) is SourceError
        assert isinstance(outcome.error.cause, RuntimeError)

    @pytest.mark.asyncio
    async def test_empty_list_is_failure(self) -> None:
        source = FakeSource(SourceTag.PRIMARY_API, [])
        outcome = await attempt_source(source, Category.WR, ScoringFormat.PPR, 1.0)
        assert isinstance(outcome, Err)
        assert isinstance(outcome.error, SourceParseError)


class TestFetchCategory:
    @pytest.mark.asyncio
    async def test_first_source_succeeds(self, cache: UnifiedCache) -> None:
        primary = FakeSource(SourceTag.PRIMARY_API, make_players(5))
        public = FakeSource(SourceTag.PUBLIC_ACCESS, make_players(5))
        orchestrator = Orchestrator(_registry(primary, public), cache)

        result = await orchestrator.fetch_category(Category.WR, ScoringFormat.PPR)

        assert result.success
        assert result.source is SourceTag.PRIMARY_API
        assert result.metadata.count == 5
        assert result.metadata.category is Category.WR
        assert result.validation is not None
        assert public.calls == []

    @pytest.mark.asyncio
    async def test_cache_hit_returns_same_result(self, cache: UnifiedCache) -> None:
        primary = FakeSource(SourceTag.PRIMARY_API, make_players(5))
        orchestrator = Orchestrator(_registry(primary), cache)

        first = await orchestrator.fetch_category(Category.WR, ScoringFormat.PPR)
        second = await orchestrator.fetch_category(Category.WR, ScoringFormat.PPR)
        third = await orchestrator.fetch_category(Category.WR, ScoringFormat.PPR)

        assert second is first
        assert third is first
        assert len(primary.calls) == 1
        entry = cache.inspect(player_key(Category.WR, ScoringFormat.PPR))
        assert entry is not None
        assert entry.hit_count == 2

    @pytest.mark.asyncio
    async def test_force_refresh_bypasses_cache(self, cache: UnifiedCache) -> None:
        primary = FakeSource(SourceTag.PRIMARY_API, make_players(5))
        orchestrator = Orchestrator(_registry(primary), cache)

        await orchestrator.fetch_category(Category.WR, ScoringFormat.PPR)
        await orchestrator.fetch_category(Category.WR, ScoringFormat.PPR, FetchOptions(force_refresh=True))

        assert len(primary.calls) == 2

    @pytest.mark.asyncio
    async def test_formats_cached_separately(self, cache: UnifiedCache) -> None:
        primary = FakeSource(SourceTag.PRIMARY_API, make_players(5))
        orchestrator = Orchestrator(_registry(primary), cache)

        await orchestrator.fetch_category(Category.WR, ScoringFormat.PPR)
        await orchestrator.fetch_category(Category.WR, ScoringFormat.HALF_PPR)

        assert primary.calls == [(Category.WR, ScoringFormat.PPR), (Category.WR, ScoringFormat.HALF_PPR)]

    @pytest.mark.asyncio
    async def test_falls_back_to_next_source(self, cache: UnifiedCache) -> None:
        primary = FakeSource(SourceTag.PRIMARY_API, error=SourceConfigurationError("no key"))
        session = FakeSource(SourceTag.AUTHENTICATED_SESSION, error=SourceNetworkError("down"))
        public = FakeSource(SourceTag.PUBLIC_ACCESS, make_players(4))
        orchestrator = Orchestrator(_registry(primary, session, public), cache)

        result = await orchestrator.fetch_category(Category.WR, ScoringFormat.PPR)

        assert result.success
        assert result.source is SourceTag.PUBLIC_ACCESS
        assert len(primary.calls) == len(session.calls) == len(public.calls) == 1

    @pytest.mark.asyncio
    async def test_timeout_moves_to_next_source(self, cache: UnifiedCache) -> None:
        slow = FakeSource(SourceTag.PRIMARY_API, make_players(4), delay=1.0)
        public = FakeSource(SourceTag.PUBLIC_ACCESS, make_players(4))
        orchestrator = Orchestrator(_registry(slow, public), cache)

        result = await orchestrator.fetch_category(Category.WR, ScoringFormat.PPR, FetchOptions(timeout=0.01))

        assert result.source is SourceTag.PUBLIC_ACCESS

    @pytest.mark.asyncio
    async def test_default_timeout_applies(self, cache: UnifiedCache) -> None:
        slow = FakeSource(SourceTag.PRIMARY_API, make_players(4), delay=1.0)
        public = FakeSource(SourceTag.PUBLIC_ACCESS, make_players(4))
        orchestrator = Orchestrator(_registry(slow, public), cache, default_timeout=0.01)

        result = await orchestrator.fetch_category(Category.WR, ScoringFormat.PPR)

        assert result.source is SourceTag.PUBLIC_ACCESS

    @pytest.mark.asyncio
    async def test_empty_source_result_is_failure(self, cache: UnifiedCache) -> None:
        empty = FakeSource(SourceTag.PRIMARY_API, [])
        public = FakeSource(SourceTag.PUBLIC_ACCESS, make_players(4))
        orchestrator = Orchestrator(_registry(empty, public), cache)

        result = await orchestrator.fetch_category(Category.WR, ScoringFormat.PPR)

        assert result.source is SourceTag.PUBLIC_ACCESS

    @pytest.mark.asyncio
    async def test_preferred_source_tried_first(self, cache: UnifiedCache) -> None:
        primary = FakeSource(SourceTag.PRIMARY_API, make_players(4))
        public = FakeSource(SourceTag.PUBLIC_ACCESS, make_players(4))
        orchestrator = Orchestrator(_registry(primary, public), cache)

        result = await orchestrator.fetch_category(
            Category.WR, ScoringFormat.PPR, FetchOptions(preferred_source=SourceTag.PUBLIC_ACCESS)
        )

        assert result.source is SourceTag.PUBLIC_ACCESS
        assert primary.calls == []

    @pytest.mark.asyncio
    async def test_all_sources_fail_serves_sample(self, cache: UnifiedCache) -> None:
        primary = FakeSource(SourceTag.PRIMARY_API, error=SourceNetworkError("down"))
        public = FakeSource(SourceTag.PUBLIC_ACCESS, error=SourceParseError("no table"))
        orchestrator = Orchestrator(_registry(primary, public), cache)

        result = await orchestrator.fetch_category(Category.QB, ScoringFormat.PPR)

        assert not result.success
        assert result.source is SourceTag.SAMPLE_FALLBACK
        assert result.metadata.count == len(result.players) == len(load_sample_players(Category.QB, ScoringFormat.PPR))
        assert result.error is not None
        assert "no table" in result.error
        assert all(p.category is Category.QB for p in result.players)

    @pytest.mark.asyncio
    async def test_sample_fallback_not_cached(self, cache: UnifiedCache) -> None:
        orchestrator = Orchestrator(SourceRegistry(), cache)

        result = await orchestrator.fetch_category(Category.QB, ScoringFormat.PPR)

        assert result.error == "No ranking sources configured"
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_successful_fetch_snapshotted(self, cache: UnifiedCache) -> None:
        sink = FakeSink()
        primary = FakeSource(SourceTag.PRIMARY_API, make_players(4))
        orchestrator = Orchestrator(_registry(primary), cache, sink=sink)

        await orchestrator.fetch_category(Category.WR, ScoringFormat.PPR)

        assert sink.stored == [(Category.WR, ScoringFormat.PPR, 4, SourceTag.PRIMARY_API)]

    @pytest.mark.asyncio
    async def test_sink_failure_does_not_fail_fetch(self, cache: UnifiedCache) -> None:
        sink = FakeSink(error=OSError("disk full"))
        primary = FakeSource(SourceTag.PRIMARY_API, make_players(4))
        orchestrator = Orchestrator(_registry(primary), cache, sink=sink)

        result = await orchestrator.fetch_category(Category.WR, ScoringFormat.PPR)

        assert result.success
        assert cache.has(player_key(Category.WR, ScoringFormat.PPR))

    @pytest.mark.asyncio
    async def test_validator_failure_does_not_fail_fetch(self, cache: UnifiedCache) -> None:
        primary = FakeSource(SourceTag.PRIMARY_API, make_players(4))
        orchestrator = Orchestrator(_registry(primary), cache, validator=_ExplodingValidator())  # type: ignore[arg-type]

        result = await orchestrator.fetch_category(Category.WR, ScoringFormat.PPR)

        assert result.success
        assert result.validation is None


class TestFetchAllCategories:
    @pytest.mark.asyncio
    async def test_partial_failure(self, cache: UnifiedCache) -> None:
        source = PerCategorySource(
            SourceTag.PRIMARY_API,
            {c: make_players(3, c) for c in CONCRETE_CATEGORIES},
            failing=frozenset({Category.K}),
        )
        orchestrator = Orchestrator(_registry(source), cache)

        results = await orchestrator.fetch_all_categories(ScoringFormat.PPR)

        assert set(results) == set(CONCRETE_CATEGORIES)
        assert not results[Category.K].success
        assert results[Category.K].source is SourceTag.SAMPLE_FALLBACK
        assert all(results[c].success for c in CONCRETE_CATEGORIES if c is not Category.K)


class TestFetchOverall:
    @pytest.mark.asyncio
    async def test_merges_successful_categories(self, cache: UnifiedCache) -> None:
        source = PerCategorySource(
            SourceTag.PRIMARY_API,
            {
                Category.QB: make_players(3, Category.QB, points=300),
                Category.RB: make_players(4, Category.RB),
                Category.K: make_players(2, Category.K, points=140),
            },
            failing=frozenset({Category.WR}),
        )
        orchestrator = Orchestrator(_registry(source), cache)

        result = await orchestrator.fetch_overall(ScoringFormat.PPR)

        assert result.success
        assert result.source is SourceTag.PRIMARY_API
        assert result.metadata.category is Category.OVERALL
        assert result.metadata.count == 9
        assert [c.overall_rank for c in result.rankings] == list(range(1, 10))
        assert [c.player.name for c in result.rankings] == [p.name for p in result.players]
        assert [p.average_rank for p in result.players] == [float(r) for r in range(1, 10)]
        assert sorted(c.original_rank for c in result.rankings if c.player.category is Category.RB) == [1, 2, 3, 4]
        assert {p.category for p in result.players} == {Category.QB, Category.RB, Category.K}
        assert result.players[-1].category is Category.K

    @pytest.mark.asyncio
    async def test_overall_is_cached(self, cache: UnifiedCache) -> None:
        source = PerCategorySource(SourceTag.PRIMARY_API, {Category.QB: make_players(3, Category.QB)})
        orchestrator = Orchestrator(_registry(source), cache)

        first = await orchestrator.fetch_overall(ScoringFormat.PPR)
        calls = len(source.calls)
        second = await orchestrator.fetch_overall(ScoringFormat.PPR)

        assert second is first
        assert len(source.calls) == calls
        assert cache.has(overall_key(ScoringFormat.PPR))

    @pytest.mark.asyncio
    async def test_all_categories_fail_serves_normalized_sample(self, cache: UnifiedCache) -> None:
        orchestrator = Orchestrator(SourceRegistry(), cache)

        result = await orchestrator.fetch_overall(ScoringFormat.STANDARD)

        sample_size = len(load_sample_players(Category.OVERALL, ScoringFormat.STANDARD))
        assert not result.success
        assert result.source is SourceTag.SAMPLE_FALLBACK
        assert len(result.players) == len(result.rankings) == sample_size
        values = [c.overall_value for c in result.rankings]
        assert values == sorted(values, reverse=True)
        assert [p.average_rank for p in result.players] == [float(r) for r in range(1, sample_size + 1)]
        assert not cache.has(overall_key(ScoringFormat.STANDARD))


class TestFetchEnhancedCategory:
    @pytest.mark.asyncio
    async def test_adds_bye_week_and_consensus(self, cache: UnifiedCache) -> None:
        primary = FakeSource(SourceTag.PRIMARY_API, make_players(3))
        orchestrator = Orchestrator(_registry(primary), cache)

        result = await orchestrator.fetch_enhanced_category(Category.WR, ScoringFormat.PPR)

        assert all(p.metadata.bye_week == 7 for p in result.players)
        assert all(p.metadata.consensus_level == "high" for p in result.players)
        assert result.success


class TestClearCache:
    @pytest_asyncio.fixture
    async def orchestrator(self, cache: UnifiedCache) -> Orchestrator:
        source = FakeSource(SourceTag.PRIMARY_API, make_players(3))
        orchestrator = Orchestrator(_registry(source), cache)
        await orchestrator.fetch_category(Category.QB, ScoringFormat.PPR)
        await orchestrator.fetch_category(Category.QB, ScoringFormat.HALF_PPR)
        await orchestrator.fetch_category(Category.RB, ScoringFormat.PPR)
        return orchestrator

    @pytest.mark.asyncio
    async def test_single_entry(self, orchestrator: Orchestrator, cache: UnifiedCache) -> None:
        assert orchestrator.clear_cache(Category.QB, ScoringFormat.PPR) == 1
        assert cache.has(player_key(Category.QB, ScoringFormat.HALF_PPR))

    @pytest.mark.asyncio
    async def test_by_category(self, orchestrator: Orchestrator, cache: UnifiedCache) -> None:
        assert orchestrator.clear_cache(category=Category.QB) == 2
        assert cache.keys() == [player_key(Category.RB, ScoringFormat.PPR)]

    @pytest.mark.asyncio
    async def test_by_format_leaves_half_ppr(self, orchestrator: Orchestrator, cache: UnifiedCache) -> None:
        assert orchestrator.clear_cache(scoring_format=ScoringFormat.PPR) == 2
        assert cache.keys() == [player_key(Category.QB, ScoringFormat.HALF_PPR)]

    @pytest.mark.asyncio
    async def test_everything(self, orchestrator: Orchestrator, cache: UnifiedCache) -> None:
        assert orchestrator.clear_cache() == 3
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_stats(self, orchestrator: Orchestrator) -> None:
        stats = orchestrator.get_cache_stats()
        assert stats.total_entries == 3
        assert stats.sets == 3
