import httpx
import pytest

from fantasy_football_rankings.domain.player import Category, ScoringFormat
from fantasy_football_rankings.sources.errors import (
    SourceAuthenticationError,
    SourceConfigurationError,
    SourceParseError,
)
from fantasy_football_rankings.sources.fantasypros_session import (
    FantasyProsSessionSource,
    cheatsheet_url,
    extract_csrf_token,
)
from tests.fakes.sources import FakeAsyncTransport, ecr_page, ecr_row

_LOGIN_PAGE = '<form><input type="hidden" name="csrfmiddlewaretoken" value="tok-123"></form>'

_OVERALL_ROWS = [
    ecr_row("Ja'Marr Chase", "WR", 1, team="CIN"),
    ecr_row("Bijan Robinson", "RB", 2, team="ATL"),
    ecr_row("Josh Allen", "QB", 3, team="BUF"),
    ecr_row("Brock Bowers", "TE", 4, team="LV"),
]


class _Site:
    def __init__(self, *, accept_login: bool = True) -> None:
        self.accept_login = accept_login
        self.transport = FakeAsyncTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/accounts/login/":
            if request.method == "GET":
                return httpx.Response(200, text=_LOGIN_PAGE)
            if self.accept_login:
                return httpx.Response(302, headers={"location": "/"})
            return httpx.Response(200, text=_LOGIN_PAGE + "<p>Invalid password</p>")
        return httpx.Response(200, text=ecr_page(_OVERALL_ROWS))

    def posts(self) -> list[httpx.Request]:
        return [r for r in self.transport.requests if r.method == "POST"]


class TestCheatsheetUrl:
    @pytest.mark.parametrize(
        ("category", "scoring_format", "page"),
        [
            (Category.OVERALL, ScoringFormat.STANDARD, "consensus-cheatsheets.php"),
            (Category.OVERALL, ScoringFormat.PPR, "ppr-cheatsheets.php"),
            (Category.FLEX, ScoringFormat.HALF_PPR, "half-point-ppr-cheatsheets.php"),
            (Category.QB, ScoringFormat.PPR, "qb-cheatsheets.php"),
            (Category.RB, ScoringFormat.PPR, "ppr-rb-cheatsheets.php"),
            (Category.TE, ScoringFormat.STANDARD, "te-cheatsheets.php"),
            (Category.DST, ScoringFormat.HALF_PPR, "dst-cheatsheets.php"),
        ],
    )
    def test_pages(self, category: Category, scoring_format: ScoringFormat, page: str) -> None:
        assert cheatsheet_url(category, scoring_format).endswith(f"/nfl/rankings/{page}")


class TestExtractCsrfToken:
    def test_name_before_value(self) -> None:
        assert extract_csrf_token(_LOGIN_PAGE) == "tok-123"

    def test_value_before_name(self) -> None:
        html = "<input value='abc' name='csrfmiddlewaretoken'>"
        assert extract_csrf_token(html) == "abc"

    def test_missing(self) -> None:
        assert extract_csrf_token("<form></form>") is None


class TestFantasyProsSessionSource:
    @pytest.mark.asyncio
    async def test_logs_in_then_fetches(self) -> None:
        site = _Site()
        async with httpx.AsyncClient(transport=site.transport) as client:
            source = FantasyProsSessionSource(client, "fan", "hunter2")
            players = await source.fetch(Category.OVERALL, ScoringFormat.PPR)

        assert source.authenticated
        assert len(players) == 4
        post = site.posts()[0]
        body = post.content.decode()
        assert "csrfmiddlewaretoken=tok-123" in body
        assert "username=fan" in body

    @pytest.mark.asyncio
    async def test_logs_in_once(self) -> None:
        site = _Site()
        async with httpx.AsyncClient(transport=site.transport) as client:
            source = FantasyProsSessionSource(client, "fan", "hunter2")
            await source.fetch(Category.QB, ScoringFormat.PPR)
            await source.fetch(Category.RB, ScoringFormat.PPR)

        assert len(site.posts()) == 1

    @pytest.mark.asyncio
    async def test_flex_reads_overall_sheet(self) -> None:
        site = _Site()
        async with httpx.AsyncClient(transport=site.transport) as client:
            players = await FantasyProsSessionSource(client, "fan", "pw").fetch(Category.FLEX, ScoringFormat.PPR)

        assert site.transport.requests[-1].url.path == "/nfl/rankings/ppr-cheatsheets.php"
        assert [p.name for p in players] == ["Ja'Marr Chase", "Bijan Robinson", "Brock Bowers"]
        assert [p.average_rank for p in players] == [1.0, 2.0, 3.0]

    @pytest.mark.asyncio
    async def test_missing_credentials_fail_before_io(self) -> None:
        site = _Site()
        async with httpx.AsyncClient(transport=site.transport) as client:
            with pytest.raises(SourceConfigurationError):
                await FantasyProsSessionSource(client, "fan", "").fetch(Category.QB, ScoringFormat.PPR)

        assert site.transport.requests == []

    @pytest.mark.asyncio
    async def test_rejected_login(self) -> None:
        site = _Site(accept_login=False)
        async with httpx.AsyncClient(transport=site.transport) as client:
            source = FantasyProsSessionSource(client, "fan", "wrong")
            with pytest.raises(SourceAuthenticationError):
                await source.fetch(Category.QB, ScoringFormat.PPR)

        assert not source.authenticated

    @pytest.mark.asyncio
    async def test_login_page_without_token(self) -> None:
        transport = FakeAsyncTransport(lambda request: httpx.Response(200, text="<form></form>"))
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(SourceParseError, match="CSRF"):
                await FantasyProsSessionSource(client, "fan", "pw").fetch(Category.QB, ScoringFormat.PPR)
