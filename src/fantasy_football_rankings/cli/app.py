import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated

import typer

from fantasy_football_rankings.cli._logging import configure_logging
from fantasy_football_rankings.cli._output import print_error, print_overall, print_rankings, print_validation
from fantasy_football_rankings.config import ConfigError, create_config, load_settings
from fantasy_football_rankings.context import PipelineContext, Settings
from fantasy_football_rankings.domain.fetch_result import FetchResult, SourceTag
from fantasy_football_rankings.domain.player import Category, ScoringFormat
from fantasy_football_rankings.orchestrator import FetchOptions, Orchestrator
from fantasy_football_rankings.validation.validator import DataValidator

app = typer.Typer(name="ffr", help="Fantasy football consensus rankings: fetch, validate, normalize")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable DEBUG logging")] = False,
    config: Annotated[Path | None, typer.Option("--config", help="Path to a YAML config file")] = None,
) -> None:
    """Fantasy football consensus rankings."""
    configure_logging(verbose=verbose)
    ctx.obj = {"config_path": config}
    if ctx.invoked_subcommand is None:
        raise typer.Exit()


_CategoryArg = Annotated[str, typer.Argument(help="QB, RB, WR, TE, K, DST, FLEX or OVERALL")]
_FormatOpt = Annotated[str, typer.Option("--format", "-f", help="standard, ppr or half-ppr")]
_RefreshOpt = Annotated[bool, typer.Option("--refresh", help="Bypass the cache")]
_LimitOpt = Annotated[int | None, typer.Option("--limit", "-n", help="Show only the top N players")]


def build_context(settings: Settings) -> PipelineContext:
    return PipelineContext(settings)


def _load_settings(ctx: typer.Context) -> Settings:
    config_path: Path | None = (ctx.obj or {}).get("config_path")
    if config_path is not None and not config_path.exists():
        print_error(f"Config file not found: {config_path}")
        raise typer.Exit(code=2)
    try:
        cfg = create_config(yaml_path=str(config_path)) if config_path else create_config()
        return load_settings(cfg)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from None


def _parse_category(raw: str) -> Category:
    try:
        return Category.parse(raw)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from None


def _parse_format(raw: str) -> ScoringFormat:
    try:
        return ScoringFormat.parse(raw)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from None


def _parse_source(raw: str | None) -> SourceTag | None:
    if raw is None:
        return None
    try:
        return SourceTag(raw)
    except ValueError:
        choices = ", ".join(tag.value for tag in SourceTag if tag is not SourceTag.SAMPLE_FALLBACK)
        print_error(f"Unknown source: {raw!r}. Available: {choices}")
        raise typer.Exit(code=2) from None


def _run(settings: Settings, operation: Callable[[Orchestrator], Awaitable[FetchResult]]) -> FetchResult:
    async def _go() -> FetchResult:
        async with build_context(settings) as pipeline:
            return await operation(pipeline.orchestrator)

    return asyncio.run(_go())


def _exit_on_fallback(result: FetchResult) -> None:
    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def rankings(
    ctx: typer.Context,
    category: _CategoryArg,
    scoring_format: _FormatOpt = "ppr",
    refresh: _RefreshOpt = False,
    source: Annotated[str | None, typer.Option("--source", help="Try this source first")] = None,
    timeout: Annotated[float | None, typer.Option("--timeout", help="Per-source timeout in seconds")] = None,
    limit: _LimitOpt = None,
    enhanced: Annotated[bool, typer.Option("--enhanced", help="Add bye week and consensus level")] = False,
) -> None:
    """Show consensus rankings for one category."""
    settings = _load_settings(ctx)
    cat = _parse_category(category)
    fmt = _parse_format(scoring_format)
    options = FetchOptions(force_refresh=refresh, timeout=timeout, preferred_source=_parse_source(source))

    if enhanced:
        result = _run(settings, lambda o: o.fetch_enhanced_category(cat, fmt, options))
    else:
        result = _run(settings, lambda o: o.fetch_category(cat, fmt, options))
    print_rankings(result, limit)
    _exit_on_fallback(result)


@app.command()
def overall(
    ctx: typer.Context,
    scoring_format: _FormatOpt = "ppr",
    refresh: _RefreshOpt = False,
    limit: _LimitOpt = None,
) -> None:
    """Show the cross-category normalized ranking."""
    settings = _load_settings(ctx)
    fmt = _parse_format(scoring_format)
    result = _run(settings, lambda o: o.fetch_overall(fmt, FetchOptions(force_refresh=refresh)))
    print_overall(result, limit)
    _exit_on_fallback(result)


@app.command()
def validate(
    ctx: typer.Context,
    category: _CategoryArg,
    scoring_format: _FormatOpt = "ppr",
) -> None:
    """Fetch one category and print its data-quality report."""
    settings = _load_settings(ctx)
    cat = _parse_category(category)
    fmt = _parse_format(scoring_format)
    result = _run(settings, lambda o: o.fetch_category(cat, fmt, FetchOptions(force_refresh=True)))
    validation = result.validation or DataValidator().validate(result.players, cat, result.source.value)
    print_validation(validation)
    _exit_on_fallback(result)
