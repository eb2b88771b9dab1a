"""EduFlow CLI — run the server and handle platform-admin chores.

Usage:
    eduflow serve                                  # Run the API with uvicorn
    eduflow create-admin admin@example.com         # Create a super_admin account
    eduflow generate-secret                        # Print a JWT signing secret
"""

from __future__ import annotations

import asyncio
import secrets
import sys

import click

from eduflow import __version__


@click.group()
@click.version_option(version=__version__, prog_name="eduflow")
def cli():
    """EduFlow backend tools."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: settings.host)")
@click.option("--port", default=None, type=int, help="Port (default: settings.port)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the API server."""
    import uvicorn

    from eduflow.config import settings

    uvicorn.run(
        "eduflow.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@cli.command("generate-secret")
@click.option("--bytes", "nbytes", default=48, show_default=True, help="Entropy in bytes")
def generate_secret(nbytes: int):
    """Print a random secret for JWT_SECRET / JWT_REFRESH_SECRET."""
    if nbytes < 24:
        raise click.BadParameter("use at least 24 bytes", param_hint="--bytes")
    click.echo(secrets.token_urlsafe(nbytes))


@cli.command("create-admin")
@click.argument("email")
@click.option("--name", default="Platform Admin", show_default=True)
@click.password_option(help="Password (prompted if omitted)")
def create_admin(email: str, name: str, password: str):
    """Create a super_admin principal (exempt from institute scoping)."""
    try:
        user_id = asyncio.run(_create_admin(email, name, password))
    except click.ClickException:
        raise
    except Exception as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    click.secho(f"Created super_admin {email} ({user_id})", fg="green")


async def _create_admin(email: str, name: str, password: str) -> str:
    from eduflow.auth.context import Role
    from eduflow.auth.password import hash_password
    from eduflow.auth.service import normalize_email
    from eduflow.db.engine import async_session_factory, engine
    from eduflow.repositories.users import SqlUserRepository

    if len(password) < 8:
        raise click.ClickException("Password must be at least 8 characters")
    try:
        async with async_session_factory() as session:
            users = SqlUserRepository(session)
            email = normalize_email(email)
            if await users.get_by_email(email):
                raise click.ClickException(f"{email} is already registered")
            user = await users.create(
                email=email,
                name=name,
                password_hash=hash_password(password),
                role=Role.SUPER_ADMIN.value,
            )
            return str(user.id)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    cli()
