"""Key pair commands."""

from __future__ import annotations

import typer

from bunq_sdk.apps.cli.state import get_settings
from bunq_sdk.services.crypto.pki import generate_key_pair
from bunq_sdk.services.storage import CredentialStore, KeyLoadError

app = typer.Typer(help="Manage the client RSA key pair")


@app.command("create")
def cmd_create(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing key pair"),
):
    settings = get_settings(ctx)
    store = CredentialStore(settings.state_dir)
    if store.has_keys() and not force:
        typer.secho(f"Key pair already exists in {store.base_dir}; use --force to replace it", fg=typer.colors.YELLOW)
        raise typer.Exit(1)
    store.save_keys(generate_key_pair(), settings.passphrase_bytes)
    typer.echo(f"Key pair written to {store.base_dir}")


@app.command("show")
def cmd_show(ctx: typer.Context):
    settings = get_settings(ctx)
    store = CredentialStore(settings.state_dir)
    if not store.has_keys():
        typer.echo("Key pair not found")
        raise typer.Exit(1)
    try:
        keys = store.load_keys(settings.passphrase_bytes)
    except KeyLoadError as exc:
        typer.secho(f"error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    typer.echo(keys.public_key_pem.rstrip("\n"))


__all__ = ["app"]
