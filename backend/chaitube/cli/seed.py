"""``flask seed`` commands: demo channels for exercising the session flow locally.

``run`` creates alice, bob and carol with known passwords and the
subscription edges ``bob → alice``, ``carol → alice`` and ``alice → bob``, so
login, refresh rotation and channel profiles can be tried against a fresh
database. ``fresh`` rebuilds the two tables first and is refused in
production.
"""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from chaitube.core.extensions import db
from chaitube.seeds import seed_data

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.getLogger(seed_data.__name__).setLevel(level)
    LOGGER.setLevel(level)


def _echo_summary(summary: dict[str, dict[str, int]]) -> None:
    """Print per-table counters followed by the demo credentials."""
    click.echo("Seed summary:")
    if not summary:
        click.echo("  (no changes)")
        return
    width = max(len(name) for name in summary)
    for table, counters in sorted(summary.items()):
        created = counters.get("created", 0)
        existing = counters.get("existing", 0)
        click.echo(f"  {table.ljust(width)}  created={created:>2}  existing={existing:>2}")

    click.echo("Demo logins (POST /api/v1/users/login):")
    for fixture in seed_data.USER_FIXTURES:
        click.echo(f"  {fixture['username']} / {fixture['password']}")


def _ensure_non_production() -> None:
    """Refuse to drop accounts outside development and test setups."""
    config = current_app.config
    app_env = str(config.get("APP_ENV", "")).lower()
    if app_env == "production" or not (config.get("DEBUG") or config.get("TESTING")):
        raise click.UsageError(
            "'flask seed fresh' drops every account and session; "
            "it only runs with DEBUG or TESTING enabled."
        )


def _seed(verbose: bool, failure: str) -> None:
    try:
        summary = seed_data.run_all(db, verbose=verbose)
    except (SQLAlchemyError, RuntimeError, ValueError) as exc:  # pragma: no cover
        db.session.rollback()
        raise click.ClickException(f"{failure}: {exc}") from exc
    _echo_summary(summary)


@click.group("seed")
@click.option("--verbose", is_flag=True, help="Log each seeding step.")
@click.pass_context
def seed_cli(ctx: click.Context, verbose: bool) -> None:
    """Load demo channels and subscriptions."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose)


@seed_cli.command("run")
@click.pass_context
@with_appcontext
def run_command(ctx: click.Context) -> None:
    """Create missing demo channels and subscription edges.

    Existing users keep their password and live refresh token.
    """
    _seed(bool(ctx.obj.get("verbose", False)), "Seeding failed")


@seed_cli.command("fresh")
@click.option("--yes", is_flag=True, help="Do not ask before dropping the tables.")
@click.pass_context
@with_appcontext
def fresh_command(ctx: click.Context, yes: bool) -> None:
    """Drop users and subscriptions, recreate them, then seed the demo channels."""
    _ensure_non_production()
    if not yes:
        click.confirm(
            "All accounts, subscriptions and signed-in sessions will be deleted. Continue?",
            abort=True,
        )
    LOGGER.info("Rebuilding users and subscriptions tables")
    db.session.remove()
    db.drop_all()
    db.create_all()
    _seed(bool(ctx.obj.get("verbose", False)), "Fresh seed failed")
