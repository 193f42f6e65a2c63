from rich.console import Console
from rich.table import Table

from fantasy_football_rankings.domain.fetch_result import FetchResult
from fantasy_football_rankings.domain.validation import ValidationResult

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {message}")


def print_fetch_status(result: FetchResult) -> None:
    meta = result.metadata
    if result.success:
        console.print(
            f"[bold green]{meta.count}[/bold green] {meta.category} players ({meta.scoring_format}) "
            f"from [bold]{result.source}[/bold]"
        )
    else:
        console.print(
            f"[bold yellow]Sample data[/bold yellow]: {meta.count} {meta.category} players ({meta.scoring_format})"
        )
        err_console.print(f"[yellow]{result.error}[/yellow]")


def print_rankings(result: FetchResult, limit: int | None = None) -> None:
    """Print a category rankings table."""
    print_fetch_status(result)
    players = result.players[:limit] if limit else result.players
    if not players:
        console.print("No players found.")
        return
    show_meta = any(p.metadata.bye_week is not None or p.metadata.consensus_level for p in players)
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Rank", justify="right")
    table.add_column("Player")
    table.add_column("Team")
    table.add_column("Pos")
    table.add_column("Tier", justify="right")
    table.add_column("Proj", justify="right")
    table.add_column("Std", justify="right")
    if show_meta:
        table.add_column("Bye", justify="right")
        table.add_column("Consensus")
    for p in players:
        row = [
            f"{p.average_rank:.1f}",
            p.name,
            p.team,
            str(p.category),
            str(p.tier) if p.tier is not None else "",
            f"{p.projected_points:.0f}",
            f"{p.standard_deviation:.1f}",
        ]
        if show_meta:
            row.append(str(p.metadata.bye_week) if p.metadata.bye_week is not None else "")
            row.append(p.metadata.consensus_level or "")
        table.add_row(*row)
    console.print(table)


def print_overall(result: FetchResult, limit: int | None = None) -> None:
    """Print the normalized overall leaderboard."""
    print_fetch_status(result)
    rankings = result.rankings[:limit] if limit else result.rankings
    if not rankings:
        console.print("No players found.")
        return
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Rank", justify="right")
    table.add_column("Player")
    table.add_column("Team")
    table.add_column("Pos")
    table.add_column("Pos Rank", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("Weight", justify="right")
    table.add_column("Format", justify="right")
    table.add_column("Scarcity", justify="right")
    for calc in rankings:
        table.add_row(
            str(calc.overall_rank),
            calc.player.name,
            calc.player.team,
            str(calc.player.category),
            f"{calc.original_rank:.0f}",
            f"{calc.overall_value:.1f}",
            f"{calc.category_weight:.2f}",
            f"{calc.format_multiplier:.2f}",
            f"{calc.scarcity_multiplier:.2f}",
        )
    console.print(table)


def print_validation(validation: ValidationResult) -> None:
    """Print a validation report: score, metrics and every issue."""
    status = "[bold green]valid[/bold green]" if validation.is_valid else "[bold red]invalid[/bold red]"
    console.print(f"Quality score [bold]{validation.score}[/bold]/100 ({status})")
    console.print(
        f"  Players: {validation.players_validated} validated, "
        f"{validation.valid_players} valid, {validation.invalid_players} invalid"
    )
    m = validation.metrics
    console.print(
        f"  Completeness {m.completeness:.1f}  Consistency {m.consistency:.1f}  "
        f"Accuracy {m.accuracy:.1f}  Freshness {m.freshness:.1f}  Uniqueness {m.uniqueness:.1f}"
    )
    if not validation.errors and not validation.warnings:
        return
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Level")
    table.add_column("Kind")
    table.add_column("Player")
    table.add_column("Message")
    for issue in validation.errors:
        table.add_row("[red]error[/red]", str(issue.kind), issue.player_name or "", issue.message)
    for issue in validation.warnings:
        table.add_row("[yellow]warning[/yellow]", str(issue.kind), issue.player_name or "", issue.message)
    console.print(table)
