"""Typer-based operator CLI for the Messenger bot."""

import os

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

import asyncio
from pathlib import Path

import typer

from src.config import get_settings
from src.services.facebook_service import send_text_message
from src.services.signature import compute_signature
from src.services.training_relay import (
    TrainingCommandError,
    TrainingRelay,
    parse_training_command,
)

app = typer.Typer(help="Operate the Messenger quiz bot.")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(5000, envvar="PORT", help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the webhook server with uvicorn."""
    import uvicorn

    uvicorn.run("src.main:app", host=host, port=port, reload=reload)


@app.command()
def train(command: str = typer.Argument(..., help='e.g. "#ask hello #ans hi,hey"')):
    """Teach the reply service a trigger and its replies."""
    try:
        record = parse_training_command(command)
    except TrainingCommandError as e:
        typer.secho(f"Invalid training command: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    typer.echo(f"Trigger: {record.msg}")
    typer.echo(f"Replies: {', '.join(record.reply_msg)}")

    result = asyncio.run(TrainingRelay().train(record))
    if not result:
        typer.secho("Reply service did not accept the training record", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.secho(f"Trained: {result}", fg=typer.colors.GREEN)


@app.command("send-text")
def send_text(
    recipient_id: str = typer.Argument(..., help="Recipient PSID"),
    text: str = typer.Argument(..., help="Message text"),
):
    """Send a text message to a user through the Send API."""
    settings = get_settings()
    result = asyncio.run(
        send_text_message(settings.messenger_page_access_token, recipient_id, text)
    )
    if not result.success:
        typer.secho(f"Send failed: {result.error}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.secho(f"Sent message {result.message_id}", fg=typer.colors.GREEN)


@app.command()
def sign(
    payload_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="JSON body to sign"
    ),
):
    """Print the x-hub-signature header value for a webhook body."""
    settings = get_settings()
    typer.echo(compute_signature(payload_file.read_bytes(), settings.messenger_app_secret))


if __name__ == "__main__":
    app()
