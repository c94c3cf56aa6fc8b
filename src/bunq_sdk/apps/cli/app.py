# src/bunq_sdk/apps/cli/app.py
from __future__ import annotations

from pathlib import Path

import typer

from bunq_sdk.apps.cli.commands import ip, keys
from bunq_sdk.apps.cli.state import CliState, get_settings, run_flow
from bunq_sdk.services.bootstrap import BunqBootstrap
from bunq_sdk.services.logging import setup_logging

app = typer.Typer(help="bunq API client", no_args_is_help=True)
app.add_typer(keys.app, name="keys")
app.add_typer(ip.app, name="ip")


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML settings file", envvar="BUNQ_CONFIG"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines"),
):
    setup_logging(log_level, json_output=json_logs)
    ctx.obj = CliState(config_path=config)


@app.command("setup")
def cmd_setup(ctx: typer.Context):
    """Create keys, installation, device registration and session as needed."""
    bootstrap = BunqBootstrap.from_settings(get_settings(ctx))
    run_flow(bootstrap.run())
    typer.echo(f"Session ready (state in {bootstrap.store.base_dir})")


async def _user(bootstrap: BunqBootstrap) -> dict:
    ctx = await bootstrap.run()
    user = await bootstrap.fetch_user(ctx)
    return {"kind": type(user).__name__, "id": user.id, "display_name": user.display_name}


async def _accounts(bootstrap: BunqBootstrap) -> list[str]:
    ctx = await bootstrap.run()
    user_id = await bootstrap.fetch_user_id(ctx)
    lines = []
    for account in await bootstrap.list_monetary_accounts(ctx, user_id):
        balance = str(account.balance) if account.balance else "-"
        lines.append(f"{account.id}\t{account.description or ''}\t{balance}")
    return lines


@app.command("user")
def cmd_user(ctx: typer.Context):
    """Show the user that owns the API key."""
    bootstrap = BunqBootstrap.from_settings(get_settings(ctx))
    info = run_flow(_user(bootstrap))
    typer.echo(f"{info['kind']} {info['id']} {info['display_name'] or ''}".rstrip())


@app.command("accounts")
def cmd_accounts(ctx: typer.Context):
    """List monetary accounts with their balances."""
    bootstrap = BunqBootstrap.from_settings(get_settings(ctx))
    for line in run_flow(_accounts(bootstrap)):
        typer.echo(line)


__all__ = ["app"]
