"""Leaderboard maintenance CLI commands."""

import asyncio

import typer

rankings_app = typer.Typer()


@rankings_app.command("rebuild")
def rebuild() -> None:
    """Recount every volunteer's total and rewrite all leaderboards."""
    asyncio.run(_rebuild())


async def _rebuild() -> None:
    """Async implementation of the rebuild."""
    from canvass_api.core.config import get_settings
    from canvass_api.core.database import dispose_engine, get_session_factory, init_engine
    from canvass_api.services.leaderboard_service import rebuild_all

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        factory = get_session_factory()
        async with factory() as session:
            summary = await rebuild_all(session)
        typer.echo(f"Recounted {summary.users} users and rewrote {summary.boards} leaderboards")
    finally:
        await dispose_engine()
