"""Volunteer management CLI commands."""

import asyncio

import typer

user_app = typer.Typer()


@user_app.command("create")
def create_user(
    username: str = typer.Option(..., prompt=True, help="Username"),
    email: str = typer.Option(..., prompt=True, help="Email address"),
    state_code: str | None = typer.Option(None, "--state", help="Two-letter state code"),
    role: str = typer.Option("volunteer", help="User role"),
) -> None:
    """Create a volunteer."""
    asyncio.run(_create_user(username, email, state_code, role))


async def _create_user(username: str, email: str, state_code: str | None, role: str) -> None:
    """Async implementation of volunteer creation."""
    from canvass_api.core.config import get_settings
    from canvass_api.core.database import dispose_engine, get_session_factory, init_engine
    from canvass_api.services.user_service import create_user

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        factory = get_session_factory()
        async with factory() as session:
            user = await create_user(session, username=username, email=email, state_code=state_code, role=role)
            typer.echo(f"User '{user.username}' created with id {user.id}")
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()


@user_app.command("add-friend")
def add_friend(
    username: str = typer.Argument(..., help="Owner of the friends leaderboard"),
    friend: str = typer.Argument(..., help="Username to add to it"),
) -> None:
    """Add ``friend`` to ``username``'s friends leaderboard."""
    asyncio.run(_add_friend(username, friend))


async def _add_friend(username: str, friend: str) -> None:
    """Async implementation of adding a friend."""
    from canvass_api.core.config import get_settings
    from canvass_api.core.database import dispose_engine, get_session_factory, init_engine
    from canvass_api.services.user_service import add_friend as add_friend_service

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        factory = get_session_factory()
        async with factory() as session:
            await add_friend_service(session, username, friend)
            typer.echo(f"'{friend}' now appears on '{username}''s friends leaderboard")
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()


@user_app.command("token")
def issue_token(
    username: str = typer.Argument(..., help="Username to issue a token for"),
    role: str = typer.Option("volunteer", help="Role claim"),
) -> None:
    """Print a bearer token for local testing."""
    from canvass_api.core.config import get_settings
    from canvass_api.core.security import create_access_token

    settings = get_settings()
    token = create_access_token(
        username,
        role,
        settings.jwt_secret_key,
        settings.jwt_algorithm,
        settings.jwt_access_token_expire_minutes,
    )
    typer.echo(token)
