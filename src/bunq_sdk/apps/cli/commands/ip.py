"""Permitted IP commands."""

from __future__ import annotations

import json

import typer

from bunq_sdk.apps.cli.state import get_settings, run_flow
from bunq_sdk.services.bootstrap import BunqBootstrap

app = typer.Typer(help="Permitted IPs of the API key credential")


async def _list(bootstrap: BunqBootstrap) -> list[dict]:
    ctx = await bootstrap.run()
    user_id = await bootstrap.fetch_user_id(ctx)
    items = await bootstrap.list_permitted_ips(ctx, user_id)
    return [item.model_dump(exclude_none=True) for item in items]


async def _add(bootstrap: BunqBootstrap, ip: str, ip_id: str | None) -> int:
    ctx = await bootstrap.run()
    user_id = await bootstrap.fetch_user_id(ctx)
    if not ip_id:
        credentials = await bootstrap.list_permitted_ips(ctx, user_id)
        if not credentials:
            raise typer.BadParameter("no credential-password-ip found; pass --ip-id")
        ip_id = str(credentials[0].id)
    return await bootstrap.add_permitted_ip(ctx, user_id, ip_id, ip)


@app.command("list")
def cmd_list(ctx: typer.Context):
    bootstrap = BunqBootstrap.from_settings(get_settings(ctx))
    typer.echo(json.dumps(run_flow(_list(bootstrap)), ensure_ascii=False, indent=2))


@app.command("add")
def cmd_add(
    ctx: typer.Context,
    ip: str = typer.Argument(..., help="IP address to permit"),
    ip_id: str | None = typer.Option(None, "--ip-id", help="credential-password-ip id (defaults to the first one)"),
):
    bootstrap = BunqBootstrap.from_settings(get_settings(ctx))
    created = run_flow(_add(bootstrap, ip, ip_id))
    typer.echo(f"Permitted IP {ip} added (id {created})")


__all__ = ["app"]
