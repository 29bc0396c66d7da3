from __future__ import annotations

import sys
import logging

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from .config import load_config, validate_settings, get_creator_config
from .database.repository import Repository, SYNC_TYPES
from .errors import ConfigurationError, PortfolioError
from .utils.logging_config import setup_logging

console = Console()
logger = logging.getLogger(__name__)


def _build_app(ctx):
    """Build a throwaway Flask app so the CLI shares the server's wiring."""
    from .web.app import create_app

    return create_app(ctx.obj["config"])


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx, verbose):
    """Creator Portfolio - YouTube sync, reel analysis and profile generation."""
    ctx.ensure_object(dict)
    config = load_config()
    if verbose:
        config["log_level"] = "DEBUG"
    setup_logging(config.get("log_file"), config["log_level"])
    ctx.obj["config"] = config

    if ctx.invoked_subcommand == "check-config":
        return
    try:
        ctx.obj["settings"] = validate_settings(config)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        console.print("Set them in [bold].env[/bold] (see .env.example).")
        sys.exit(1)


@cli.command("check-config")
@click.pass_context
def check_config(ctx):
    """Validate settings and list what is configured."""
    config = ctx.obj["config"]
    try:
        settings = validate_settings(config)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        sys.exit(1)

    table = Table(title="Configuration")
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    def flag(value) -> str:
        return "[green]set[/green]" if value else "[yellow]not set[/yellow]"

    table.add_row("Database", settings.db_path)
    table.add_row("YOUTUBE_API_KEY", flag(settings.youtube_api_key))
    table.add_row("YOUTUBE_CHANNEL_ID", settings.trusted_channel_id)
    table.add_row("GEMINI_API_KEY", flag(settings.gemini_api_key))
    table.add_row("Gemini model", settings.gemini_model)
    table.add_row("CRON_SECRET", flag(settings.cron_secret))
    table.add_row("Creator", get_creator_config(config)["name"])
    console.print(table)


@cli.command("sync-youtube")
@click.pass_context
def sync_youtube(ctx):
    """Fetch the trusted channel's latest videos and replace the stored set."""
    from .web.app import get_ingestion_pipeline, get_repo

    app = _build_app(ctx)
    try:
        with console.status("[bold]Syncing YouTube channel...[/bold]"):
            result = get_ingestion_pipeline(app).run("cli")
    except PortfolioError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        sys.exit(1)
    finally:
        get_repo(app).close()

    debug = result["debug"]
    console.print(f"[green]{result['message']}[/green]")
    console.print(
        f"  Validated: {debug.get('videos_after_validation', 0)}/"
        f"{debug.get('videos_before_validation', 0)}, "
        f"rejected: {debug.get('rejected', 0)}"
    )


@cli.command()
@click.option("--limit", "-n", type=int, default=None, help="Max videos to show")
@click.pass_context
def videos(ctx, limit):
    """List stored videos, newest first."""
    repo = Repository(ctx.obj["settings"].db_path)
    try:
        video_list = repo.get_videos(limit=limit)
    finally:
        repo.close()

    if not video_list:
        console.print("[yellow]No videos stored yet.[/yellow]")
        console.print("Sync with: [bold]portfolio sync-youtube[/bold]")
        return

    table = Table(title="Stored Videos")
    table.add_column("Published")
    table.add_column("Title")
    table.add_column("Kind")
    table.add_column("Views", justify="right")

    for v in video_list:
        kind = "live" if v.is_live else "short" if v.is_short else "video"
        table.add_row((v.published_at or "")[:10], v.title[:60], kind, v.view_count)

    console.print(table)


@cli.command("sync-instagram")
@click.pass_context
def sync_instagram(ctx):
    """Store the configured Instagram posts (no network calls)."""
    from .web.app import get_instagram_feed, get_repo

    app = _build_app(ctx)
    try:
        result = get_instagram_feed(app).sync("cli")
    finally:
        get_repo(app).close()

    console.print(f"[green]{result['message']}[/green] ({result['added']} new)")


@cli.command()
@click.pass_context
def instagram(ctx):
    """List the Instagram feed as served by the API."""
    from .web.app import get_instagram_feed, get_repo

    app = _build_app(ctx)
    try:
        posts = get_instagram_feed(app).posts()
    finally:
        get_repo(app).close()

    if not posts:
        console.print("[yellow]No Instagram posts configured.[/yellow]")
        console.print("Add post URLs under [bold]instagram:[/bold] in config.yaml")
        return

    table = Table(title="Instagram Feed")
    table.add_column("Date")
    table.add_column("Account")
    table.add_column("URL")
    for p in posts:
        table.add_row(p.timestamp[:10], p.account_type, p.post_url)
    console.print(table)


@cli.command("analyze-reel")
@click.argument("url")
@click.pass_context
def analyze_reel(ctx, url):
    """Analyze an Instagram reel (cached per URL).

    \b
    Examples:
        portfolio analyze-reel https://www.instagram.com/reel/ABC123/
    """
    from .web.app import get_reel_pipeline, get_repo

    app = _build_app(ctx)
    try:
        with console.status("[bold]Analyzing reel...[/bold]"):
            analysis, cached = get_reel_pipeline(app).get_or_create_analysis(url)
    except PortfolioError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        sys.exit(1)
    finally:
        get_repo(app).close()

    ai = analysis.ai_analysis
    lines = [
        f"[bold]Creator:[/bold] @{analysis.creator_username}",
        f"[bold]Topic:[/bold] {ai.topic}  |  [bold]Tone:[/bold] {ai.tone}  |  "
        f"[bold]Language:[/bold] {ai.language}",
        f"[bold]Audience:[/bold] {ai.audience}",
        f"[bold]Virality:[/bold] {ai.virality_score}/10",
    ]
    if ai.keywords:
        lines.append(f"[bold]Keywords:[/bold] {', '.join(ai.keywords)}")
    if ai.recommended_hashtags:
        lines.append(
            "[bold]Hashtags:[/bold] " + " ".join(f"#{h}" for h in ai.recommended_hashtags)
        )
    for idea in ai.improvement_ideas:
        lines.append(f"  - {idea}")

    console.print()
    console.print(Panel(
        "\n".join(lines),
        title=f"[bold cyan]Reel Analysis{' (cached)' if cached else ''}[/bold cyan]",
        border_style="cyan",
        padding=(1, 2),
    ))

    if analysis.competitors:
        table = Table(title="Similar Creators")
        table.add_column("Username")
        table.add_column("Reason")
        for c in analysis.competitors:
            table.add_row(f"@{c.username}", c.reason)
        console.print(table)


@cli.command()
@click.option("--limit", "-n", type=int, default=20, help="Max analyses to show")
@click.pass_context
def reels(ctx, limit):
    """List stored reel analyses."""
    repo = Repository(ctx.obj["settings"].db_path)
    try:
        analyses = repo.get_reel_analyses(limit=limit)
    finally:
        repo.close()

    if not analyses:
        console.print("[yellow]No reels analyzed yet.[/yellow]")
        return

    table = Table(title="Reel Analyses")
    table.add_column("Analyzed")
    table.add_column("Creator")
    table.add_column("Topic")
    table.add_column("Virality", justify="right")
    table.add_column("URL")

    for a in analyses:
        table.add_row(
            (a.created_at or "")[:10],
            f"@{a.creator_username}",
            a.ai_analysis.topic,
            str(a.ai_analysis.virality_score),
            a.reel_url,
        )

    console.print(table)


@cli.command("generate-profile")
@click.pass_context
def generate_profile(ctx):
    """Regenerate the creator profile from the stored videos."""
    from .web.app import get_profile_writer, get_repo

    app = _build_app(ctx)
    try:
        with console.status("[bold]Writing profile...[/bold]"):
            profile = get_profile_writer(app).run("cli")
    except PortfolioError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        sys.exit(1)
    finally:
        get_repo(app).close()

    console.print()
    console.print(Panel(
        f"[bold]{profile.tagline}[/bold]\n\n{profile.bio}\n\n"
        f"[cyan]Skills:[/cyan] {', '.join(profile.skills)}\n"
        f"[cyan]Personality:[/cyan] {profile.personality}",
        title="[bold green]Profile[/bold green]",
        border_style="green",
        padding=(1, 2),
    ))


@cli.command()
@click.option("--limit", "-n", type=int, default=20, help="Max entries to show")
@click.option(
    "--type", "-t", "log_type", default=None,
    type=click.Choice(sorted(SYNC_TYPES)), help="Filter by log type",
)
@click.pass_context
def logs(ctx, limit, log_type):
    """Show the sync audit log, newest first."""
    repo = Repository(ctx.obj["settings"].db_path)
    try:
        entries = repo.get_sync_logs(limit=limit, log_type=log_type)
    finally:
        repo.close()

    if not entries:
        console.print("[yellow]No sync log entries.[/yellow]")
        return

    table = Table(title="Sync Log")
    table.add_column("Time")
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("Message")

    for e in entries:
        color = "green" if e.status == "success" else "red"
        table.add_row(
            (e.timestamp or "")[:19],
            e.type,
            f"[{color}]{e.status}[/{color}]",
            e.message,
        )

    console.print(table)


@cli.command()
@click.pass_context
def status(ctx):
    """Show stored counts and the latest sync of each kind."""
    repo = Repository(ctx.obj["settings"].db_path)
    try:
        stats = repo.get_stats()
    finally:
        repo.close()

    table = Table(title="Creator Portfolio Status")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Videos", str(stats["videos"]))
    table.add_row("Instagram Posts", str(stats["instagram_posts"]))
    table.add_row("Reel Analyses", str(stats["reel_analyses"]))
    table.add_row("Sync Log Entries", str(stats["sync_logs"]))
    table.add_section()

    for log_type, last in sorted(stats["last_sync"].items()):
        color = "green" if last["status"] == "success" else "red"
        table.add_row(
            f"  last {log_type}",
            f"[{color}]{last['status']}[/{color}] {(last['timestamp'] or '')[:19]}",
        )

    console.print(table)


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", "-p", type=int, default=5000, help="Port to bind to")
@click.option("--debug", is_flag=True, help="Enable debug mode")
@click.pass_context
def web(ctx, host, port, debug):
    """Start the portfolio backend API.

    \b
    Examples:
        portfolio web                    # Start on localhost:5000
        portfolio web -p 8080            # Start on port 8080
    """
    from .web.app import create_app

    app = create_app(ctx.obj["config"])

    console.print()
    console.print(Panel.fit(
        f"[bold green]Creator Portfolio API[/bold green]\n"
        f"[dim]Listening on:[/dim] [bold]http://{host}:{port}/api[/bold]",
        border_style="green",
    ))
    console.print()

    app.run(host=host, port=port, debug=debug)
