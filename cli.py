#!/usr/bin/env python3
"""
CLI for the cricket_core simulation
"""
import logging
import random
from collections import Counter

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import track
from rich.table import Table

from cricket_core.config import settings
from cricket_core.database import init_db
from cricket_core.engine import AuctionEngine, MatchEngine, TournamentEngine
from cricket_core.engine.auction_engine import BidStrategy
from cricket_core.engine.formats import MatchFormat
from cricket_core.engine.tournament_engine import TournamentConfig, TournamentFormat
from cricket_core.errors import CricketCoreError
from cricket_core.generators import PlayerGenerator, TeamGenerator
from cricket_core.models.player import PlayerRole

console = Console()

# Per squad: role -> (home players, overseas players)
SQUAD_TEMPLATE = {
    PlayerRole.WICKET_KEEPER: (2, 0),
    PlayerRole.BATSMAN: (4, 2),
    PlayerRole.ALL_ROUNDER: (3, 1),
    PlayerRole.BOWLER: (4, 2),
}
SQUAD_TIERS = ["elite", "star", "good", "good", "solid", "solid"]


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
def cli(log_level):
    """Cricket core - match, auction and tournament simulation"""
    logging.basicConfig(
        level=(log_level or settings.LOG_LEVEL).upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _build_squads(count: int, seed: int):
    """Teams with ready-made squads, skipping the auction"""
    rng = random.Random(seed)
    generator = PlayerGenerator(seed=seed, rng=rng)
    teams = TeamGenerator.create_teams(count)
    for team in teams:
        for role, (home, overseas) in SQUAD_TEMPLATE.items():
            for i in range(home + overseas):
                country = PlayerGenerator.HOME_COUNTRY if i < home else generator.overseas_country()
                player = generator.generate_player(role=role, country=country, tier=rng.choice(SQUAD_TIERS))
                team.add_player(player)
        team.auto_select_xi()
    return teams, TeamGenerator.create_venues(teams, rng)


@cli.command("init-db")
def init_db_command():
    """Initialize the database"""
    console.print("[yellow]Initializing database...[/yellow]")
    init_db()
    console.print("[green]Database initialized successfully![/green]")


@cli.command()
@click.option("--count", default=230, help="Number of players to generate")
@click.option("--seed", default=None, type=int, help="Seed for reproducible output")
@click.option("--save/--no-save", default=True, help="Save players to the database")
def generate_players(count: int, seed, save: bool):
    """Generate fictional players for the auction pool"""
    console.print(f"[yellow]Generating {count} players...[/yellow]")
    players = PlayerGenerator(seed=seed).generate_player_pool(count)

    table = Table(title="Sample Generated Players")
    table.add_column("Name", style="cyan")
    table.add_column("Age")
    table.add_column("Country")
    table.add_column("Role", style="magenta")
    table.add_column("BAT", justify="right")
    table.add_column("BOWL", justify="right")
    table.add_column("OVR", justify="right", style="green")
    table.add_column("Base Price", justify="right")

    for player in players[:20]:
        table.add_row(
            player.name,
            str(player.age),
            player.country,
            player.role.value,
            str(player.batting),
            str(player.bowling),
            str(player.overall_rating),
            f"{player.base_price:.1f}",
        )
    console.print(table)

    # Summaries before saving to avoid detached instance issues
    roles = Counter(p.role.value for p in players)
    countries = Counter(p.country for p in players)

    if save:
        init_db()
        PlayerGenerator.save_players_to_db(players)
        console.print(f"[green]{len(players)} players saved to database![/green]")

    console.print("\n[bold]Role Distribution:[/bold]")
    for role, n in sorted(roles.items()):
        console.print(f"  {role}: {n}")
    console.print("\n[bold]Country Distribution:[/bold]")
    for country, n in countries.most_common():
        console.print(f"  {country}: {n}")


@cli.command()
@click.option("--format", "match_format", type=click.Choice([f.value for f in MatchFormat]), default="t20")
@click.option("--seed", default=None, type=int, help="Seed for reproducible output")
def simulate_match(match_format: str, seed):
    """Simulate a match between two generated teams"""
    seed = seed if seed is not None else random.randrange(2 ** 32)
    (team1, team2), venues = _build_squads(2, seed)

    for team in (team1, team2):
        console.print(Panel(f"[bold cyan]{team.name}[/bold cyan]"))
        for p in team.batting_order:
            console.print(f"  {p.name} ({p.role.value}) - BAT: {p.batting}, BOWL: {p.bowling}")

    console.print("\n[yellow]Simulating match...[/yellow]\n")
    engine = MatchEngine(rng=random.Random(seed))
    try:
        engine.initialise(team1, team2, venues[0], MatchFormat(match_format))
        result = engine.simulate_match()
    except CricketCoreError as exc:
        raise click.ClickException(str(exc)) from exc

    console.print(Panel("[bold]Match Result[/bold]"))
    for key in ("innings1", "innings2"):
        inn = result[key]
        console.print(
            f"[cyan]{inn['batting_team']}:[/cyan] {inn['runs']}/{inn['wickets']} "
            f"({inn['overs']} overs) - RR: {inn['run_rate']}"
        )
    for i, so in enumerate(result["super_overs"], 1):
        first, second = so["innings"]
        console.print(
            f"[yellow]Super Over {i}:[/yellow] {first['batting_team']} {first['runs']}/{first['wickets']}, "
            f"{second['batting_team']} {second['runs']}/{second['wickets']}"
        )
    winner = result["winner"] or "No winner"
    console.print(f"\n[bold green]Winner: {winner.upper()}[/bold green]")
    console.print(f"[bold]Margin: {result['margin']}[/bold]")

    for innings in engine.innings[:2]:
        console.print(f"\n[bold]{innings.batting_team} Innings:[/bold]")
        _print_scorecard(innings)


def _print_scorecard(innings):
    """Print innings scorecard"""
    bat_table = Table(title="Batting")
    bat_table.add_column("Batter", style="cyan")
    bat_table.add_column("Dismissal")
    bat_table.add_column("R", justify="right")
    bat_table.add_column("B", justify="right")
    bat_table.add_column("4s", justify="right")
    bat_table.add_column("6s", justify="right")
    bat_table.add_column("SR", justify="right")

    for bi in innings.batter_innings.values():
        dismissal = bi.dismissal if bi.is_out else "not out"
        bat_table.add_row(
            bi.name, dismissal, str(bi.runs), str(bi.balls),
            str(bi.fours), str(bi.sixes), f"{bi.strike_rate:.1f}",
        )
    console.print(bat_table)

    bowl_table = Table(title="Bowling")
    bowl_table.add_column("Bowler", style="magenta")
    bowl_table.add_column("O", justify="right")
    bowl_table.add_column("R", justify="right")
    bowl_table.add_column("W", justify="right")
    bowl_table.add_column("Econ", justify="right")

    for spell in innings.bowler_spells.values():
        bowl_table.add_row(
            spell.name, spell.overs_display, str(spell.runs), str(spell.wickets), f"{spell.economy:.1f}",
        )
    console.print(bowl_table)


@cli.command()
@click.option("--teams", "team_count", default=8, help="Number of franchises (2-8)")
@click.option("--players", "player_count", default=230, help="Size of the auction pool")
@click.option("--seed", default=None, type=int, help="Seed for reproducible output")
def auction(team_count: int, player_count: int, seed):
    """Run an AI-only auction over a generated player pool"""
    seed = seed if seed is not None else random.randrange(2 ** 32)
    rng = random.Random(seed)
    teams = TeamGenerator.create_teams(team_count)
    players = PlayerGenerator(seed=seed, rng=rng).generate_player_pool(player_count)
    strategies = {t.name: rng.choice(list(BidStrategy)) for t in teams}

    engine = AuctionEngine(players, teams, strategies=strategies, human_teams=[], rng=rng)
    engine.start()
    for _ in track(range(len(engine.lots)), description="Auctioning..."):
        if not engine.is_active:
            break
        _run_lot(engine)
    summary = engine.aggregates()

    table = Table(title="Auction Summary")
    table.add_column("Team", style="cyan")
    table.add_column("Strategy")
    table.add_column("Players", justify="right")
    table.add_column("Overseas", justify="right")
    table.add_column("Spent", justify="right")
    table.add_column("Remaining", justify="right", style="green")
    for name, budget in engine.budgets.items():
        table.add_row(
            name, budget.strategy.value, str(budget.squad_size), str(budget.overseas_count),
            f"{budget.spent:.1f}", f"{budget.remaining:.1f}",
        )
    console.print(table)
    console.print(
        f"Sold: {summary['sold']}  Unsold: {summary['unsold']}  "
        f"Revenue: {summary['total_revenue']:.1f} (avg {summary['average_price']:.2f})  "
        f"Top buy: {summary['highest_player']} for {summary['highest_price']:.1f}"
    )


def _run_lot(engine: AuctionEngine) -> None:
    """Tick until the open lot closes"""
    lot = engine.current_lot
    while engine.is_active and engine.current_lot is lot:
        engine.tick(engine.rules.bidding_time)


@cli.command()
@click.option("--teams", "team_count", default=8, help="Number of franchises (2-8)")
@click.option("--format", "tournament_format", type=click.Choice([f.value for f in TournamentFormat]),
              default="hybrid")
@click.option("--seed", default=None, type=int, help="Seed for reproducible output")
def tournament(team_count: int, tournament_format: str, seed):
    """Simulate a full tournament"""
    seed = seed if seed is not None else random.randrange(2 ** 32)
    teams, venues = _build_squads(team_count, seed)
    config = TournamentConfig(name="Franchise League", format=TournamentFormat(tournament_format))
    try:
        engine = TournamentEngine(config, teams, venues, seed=seed)
    except CricketCoreError as exc:
        raise click.ClickException(str(exc)) from exc

    def show(fixture):
        console.print(f"  {fixture.id:>3}. {fixture.stage}: {fixture.team1} v {fixture.team2} - {fixture.result}")

    champion = engine.simulate_all(on_match=show)

    for label, table in engine.tables.items():
        rich_table = Table(title=label)
        for column in ("Pos", "Team", "P", "W", "L", "T", "NR", "Pts", "NRR"):
            rich_table.add_column(column, justify="left" if column == "Team" else "right")
        for s in table.standings():
            rich_table.add_row(
                str(s.position), s.team, str(s.played), str(s.won), str(s.lost),
                str(s.tied), str(s.no_result), str(s.points), f"{s.nrr:+.3f}",
            )
        console.print(rich_table)

    stats = engine.stats(count=5)
    console.print(Panel(f"[bold green]Champions: {champion}[/bold green]  Runners-up: {engine.runner_up}"))
    console.print(f"[cyan]Average Score:[/cyan] {stats['average_score']}")
    console.print("[bold]Top run scorers:[/bold]")
    for name, runs in stats["top_run_scorers"]:
        console.print(f"  {name}: {runs}")
    console.print("[bold]Top wicket takers:[/bold]")
    for name, wickets in stats["top_wicket_takers"]:
        console.print(f"  {name}: {wickets}")


if __name__ == "__main__":
    cli()
