"""
Command-line interface for RegioWyniki lookups and club sync jobs.
Usage examples:
  regiosync search "Wisła"
  regiosync club https://regiowyniki.pl/druzyna/Pilka_Nozna/malopolskie/Wisla_Krakow/ --part table
  regiosync register 42 https://regiowyniki.pl/druzyna/Pilka_Nozna/malopolskie/Wisla_Krakow/
  regiosync sync-all
  regiosync serve --interval-seconds 3600

Registrations are always kept in the SQL registry (REGISTRY_DATABASE_URL) so
they survive between invocations.
"""

import asyncio
import json
from typing import Any, Optional

import click

from regiosync.apps.sync_app import ClubSyncApp
from regiosync.common.logging_utils import configure_logging
from regiosync.common.scraper_utils import region_label
from regiosync.core.config import Settings, settings
from regiosync.data_collection.scrapers.regiowyniki_scraper import RegioWynikiScraper
from regiosync.database.manager import DatabaseManager
from regiosync.database.services.sync_registrations import SqlSyncRegistry
from regiosync.domain.models import ClubSyncRegistration

MIN_QUERY_LENGTH = 2


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def _open_registry(cfg: Settings) -> SqlSyncRegistry:
    db = DatabaseManager(cfg.registry_database_url)
    db.initialize()
    db.create_tables()
    return SqlSyncRegistry(db)


async def _with_scraper(cfg: Settings, func):
    async with RegioWynikiScraper.from_settings(cfg) as scraper:
        return await func(scraper)


async def _with_app(cfg: Settings, func):
    app = ClubSyncApp(cfg)
    await app.initialize()
    try:
        return await func(app)
    finally:
        await app.cleanup()


@click.group(name="regiosync")
@click.option(
    "--database-url",
    envvar="REGISTRY_DATABASE_URL",
    default=None,
    help="SQLAlchemy URL of the registry database (default: settings.registry_database_url).",
)
@click.option("--log-level", default=None, help="Override LOG_LEVEL for this run.")
@click.pass_context
def cli(ctx: click.Context, database_url: Optional[str], log_level: Optional[str]):
    update: dict[str, Any] = {"registry_backend": "sql"}
    if database_url:
        update["registry_database_url"] = database_url
    cfg = settings.model_copy(update=update)
    configure_logging("regiosync-cli", level=log_level or cfg.log_level, log_format=cfg.log_format)
    ctx.obj = {"settings": cfg}


@cli.command()
@click.argument("query")
@click.pass_context
def search(ctx: click.Context, query: str):
    """Search clubs by name"""
    if len(query.strip()) < MIN_QUERY_LENGTH:
        raise click.BadParameter(
            f"query must be at least {MIN_QUERY_LENGTH} characters", param_hint="QUERY"
        )
    results = asyncio.run(_with_scraper(_settings(ctx), lambda s: s.search_clubs(query.strip())))
    _echo_json(
        {
            "clubs": [
                {**_dump(r), "regionLabel": region_label(r.region)} for r in results
            ]
        }
    )


@cli.command()
@click.argument("url")
@click.option(
    "--part",
    type=click.Choice(["details", "table", "schedule", "all"]),
    default="all",
    show_default=True,
)
@click.pass_context
def club(ctx: click.Context, url: str, part: str):
    """Fetch club details, league table and/or schedule"""
    cfg = _settings(ctx)

    async def _run(scraper: RegioWynikiScraper):
        if part == "details":
            details = await scraper.get_club_details(url)
            return _dump(details) if details is not None else None
        if part == "table":
            table = await scraper.get_league_table(url)
            return {"table": [_dump(e) for e in table], "season": cfg.season_label}
        if part == "schedule":
            matches = await scraper.get_match_schedule(url)
            return {"matches": [_dump(m) for m in matches], "season": cfg.season_label}
        return _dump(await scraper.get_full_club_data(url))

    payload = asyncio.run(_with_scraper(cfg, _run))
    if payload is None:
        click.echo(f"Club page could not be fetched: {url}", err=True)
        raise SystemExit(1)
    _echo_json(payload)


@cli.command()
@click.argument("club_id", type=int)
@click.argument("url")
@click.option("--disabled", is_flag=True, help="Register with sync disabled.")
@click.pass_context
def register(ctx: click.Context, club_id: int, url: str, disabled: bool):
    """Register a club for automatic sync"""
    registry = _open_registry(_settings(ctx))
    existing = registry.get_status(club_id)
    registry.register(
        ClubSyncRegistration(
            club_id=club_id,
            external_url=url,
            sync_enabled=not disabled,
            last_sync_at=existing.last_sync_at if existing else None,
        )
    )
    _echo_json(_dump(registry.get_status(club_id)))


@cli.command()
@click.argument("club_id", type=int)
@click.pass_context
def unregister(ctx: click.Context, club_id: int):
    """Remove a club from automatic sync"""
    _open_registry(_settings(ctx)).unregister(club_id)
    _echo_json({"clubId": club_id, "registered": False})


@cli.command()
@click.argument("club_id", type=int)
@click.pass_context
def status(ctx: click.Context, club_id: int):
    """Show the sync registration of a club"""
    registration = _open_registry(_settings(ctx)).get_status(club_id)
    if registration is None:
        _echo_json({"clubId": club_id, "registered": False})
        raise SystemExit(1)
    _echo_json(_dump(registration))


@cli.command(name="list")
@click.pass_context
def list_registrations(ctx: click.Context):
    """List all sync registrations"""
    _echo_json([_dump(r) for r in _open_registry(_settings(ctx)).list_all()])


@cli.command()
@click.argument("club_id", type=int)
@click.pass_context
def sync(ctx: click.Context, club_id: int):
    """Sync one registered club now"""
    result = asyncio.run(_with_app(_settings(ctx), lambda app: app.orchestrator.sync_club(club_id)))
    _echo_json(result.to_dict())
    raise SystemExit(0 if result.success else 1)


@cli.command(name="sync-all")
@click.pass_context
def sync_all(ctx: click.Context):
    """Sync all enabled registrations once"""
    result = asyncio.run(_with_app(_settings(ctx), lambda app: app.orchestrator.sync_all_clubs()))
    _echo_json(result.to_dict())
    raise SystemExit(0 if result.failed == 0 else 1)


@cli.command()
@click.option(
    "--interval-seconds",
    type=click.FloatRange(min=1),
    default=None,
    help="Interval of the recurring batch sync (default: settings.sync_interval_seconds).",
)
@click.pass_context
def serve(ctx: click.Context, interval_seconds: Optional[float]):
    """Run the recurring sync service until SIGINT/SIGTERM"""
    app = ClubSyncApp(_settings(ctx))
    asyncio.run(app.run_service(interval_seconds))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
