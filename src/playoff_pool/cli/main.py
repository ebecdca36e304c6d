"""Typer CLI application for the playoff pool engine."""

from __future__ import annotations

import enum
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path

import pandera.errors
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from playoff_pool.bracket.schema import Participant
from playoff_pool.bracket.tree import MalformedBracketError, Side
from playoff_pool.config import EngineSettings
from playoff_pool.ingest.repository import JsonRepository, load_teams
from playoff_pool.session import BracketSession
from playoff_pool.utils.logger import configure_logging

app = typer.Typer(help="Playoff pool scoring and odds CLI")
console = Console()

_KNOWN_ERRORS = (MalformedBracketError, ValidationError, pandera.errors.SchemaError, ValueError)


class SideChoice(str, enum.Enum):
    team1 = "team1"
    team2 = "team2"


@app.callback()
def _callback(
    ctx: typer.Context,
    data_dir: Path | None = typer.Option(None, "--data-dir", help="Directory holding the pool JSON files"),
    log_level: str | None = typer.Option(None, "--log-level", help="QUIET, NORMAL, VERBOSE or DEBUG"),
) -> None:
    """Playoff pool CLI: live scores, win odds, and bracket editing."""
    try:
        configure_logging(log_level)
        settings = EngineSettings.from_env()
    except _KNOWN_ERRORS as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc
    if data_dir is not None:
        settings = settings.model_copy(update={"data_dir": data_dir})
    ctx.obj = settings


@contextmanager
def _session(settings: EngineSettings) -> Iterator[BracketSession]:
    """Open a session on the configured data directory, reporting known errors."""
    try:
        yield BracketSession(JsonRepository(settings.data_dir), settings)
    except _KNOWN_ERRORS as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc


def _names(participants: list[Participant]) -> dict[str, str]:
    return {p.id: p.name for p in participants}


def _unforceable(session: BracketSession, matchup_id: int, winner_id: int) -> str:
    """Explain why *winner_id* cannot be forced to win *matchup_id*."""
    matchup = session.baseline().get(matchup_id)
    if matchup is None:
        return f"Unknown matchup {matchup_id}"
    if matchup.team1_id is None or matchup.team2_id is None:
        return f"Matchup {matchup_id} is still waiting for a team"
    return f"Team {winner_id} does not play in matchup {matchup_id}"


def _odds_table(title: str, odds: Mapping[str, float], names: Mapping[str, str]) -> Table:
    table = Table(title=title, min_width=len(title) + 4)
    table.add_column("Participant")
    table.add_column("Win %", justify="right")
    for pid, pct in odds.items():
        table.add_row(names.get(pid, pid), f"{pct:g}")
    return table


@app.command()
def scores(ctx: typer.Context) -> None:
    """Show the live leaderboard from games played so far."""
    with _session(ctx.obj) as session:
        names = _names(session.participants)
        table = Table(title="Live scores")
        table.add_column("Rank", justify="right")
        table.add_column("Participant")
        table.add_column("Score", justify="right")
        for rank, (pid, score) in enumerate(session.scores(), start=1):
            table.add_row(str(rank), names.get(pid, pid), str(score))
        console.print(table)


@app.command()
def odds(
    ctx: typer.Context,
    trials: int | None = typer.Option(None, "--trials", help="Number of simulated tournaments"),
    jobs: int | None = typer.Option(None, "--jobs", help="Parallel workers (-1 uses every core)"),
    seed: int | None = typer.Option(None, "--seed", help="Seed for a reproducible estimate"),
) -> None:
    """Estimate each participant's chance of finishing first."""
    settings: EngineSettings = ctx.obj
    overrides: dict[str, int] = {}
    if jobs is not None:
        overrides["n_jobs"] = jobs
    if seed is not None:
        overrides["seed"] = seed
    settings = settings.model_copy(update=overrides)
    with _session(settings) as session:
        result = session.odds(trials if trials is not None else settings.authoritative_trials)
        console.print(_odds_table("Win odds", result, _names(session.participants)))


@app.command()
def bump(
    ctx: typer.Context,
    matchup_id: int = typer.Argument(..., help="Matchup to edit"),
    side: SideChoice = typer.Option(..., "--side", help="Which team's score to change"),
    down: bool = typer.Option(False, "--down", help="Remove a win instead of adding one"),
    save: bool = typer.Option(False, "--save", help="Commit the edit to the data directory"),
) -> None:
    """Add (or with --down remove) one game win and show the matchup."""
    with _session(ctx.obj) as session:
        target = Side.TEAM1 if side is SideChoice.team1 else Side.TEAM2
        tree = session.apply_score_delta(matchup_id, target, -1 if down else 1)
        matchup = tree.get(matchup_id)
        if matchup is None:
            console.print(f"[red]Error: Unknown matchup {matchup_id}[/red]")
            raise typer.Exit(code=1)

        status = f"won by team {matchup.winner_id}" if matchup.is_completed else "in progress"
        console.print(
            f"Matchup {matchup.id} (round {matchup.round}): "
            f"team {matchup.team1_id} {matchup.score1} - {matchup.score2} team {matchup.team2_id}, {status}"
        )
        if save and session.is_dirty():
            session.commit()
            console.print("[green]Saved.[/green]")
        elif not save:
            console.print("[yellow]Not saved (pass --save to commit).[/yellow]")


@app.command("what-if")
def what_if(
    ctx: typer.Context,
    matchup_id: int = typer.Argument(..., help="Matchup whose outcome to force"),
    winner_id: int = typer.Argument(..., help="Team forced to win the series"),
    trials: int | None = typer.Option(None, "--trials", help="Number of simulated tournaments"),
) -> None:
    """Show win odds assuming one team takes one series."""
    with _session(ctx.obj) as session:
        if not session.participants:
            console.print("[red]Error: The pool has no participants[/red]")
            raise typer.Exit(code=1)
        result = session.what_if(matchup_id, winner_id, trials)
        if not result:
            console.print(f"[red]Error: {_unforceable(session, matchup_id, winner_id)}[/red]")
            raise typer.Exit(code=1)
        title = f"Win odds if team {winner_id} wins matchup {matchup_id}"
        console.print(_odds_table(title, result, _names(session.participants)))


@app.command()
def eliminated(ctx: typer.Context) -> None:
    """List teams and whether they have been knocked out."""
    settings: EngineSettings = ctx.obj
    with _session(settings) as session:
        teams = load_teams(JsonRepository(settings.data_dir), session.baseline())
        table = Table(title="Teams")
        table.add_column("Seed", justify="right")
        table.add_column("Team")
        table.add_column("Conference")
        table.add_column("Status")
        for team in teams:
            status = "[red]eliminated[/red]" if team.is_eliminated else "[green]alive[/green]"
            table.add_row(str(team.seed), team.name, team.conference, status)
        console.print(table)


if __name__ == "__main__":
    app()
