from bunq_sdk.apps.cli.app import app

app(prog_name="bunq")
