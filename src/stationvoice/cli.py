"""Typer CLI definition for stationvoice."""

import asyncio
import logging
import sys
from pathlib import Path

import typer

from . import config as settings
from .config import generate_config, load_config
from .core import list_available_voices, speak_text
from .tts.errors import TTSAPIError, TTSAuthError, TTSEmptyAudioError

app = typer.Typer(help="Cached text-to-speech for OSCE station prompts")


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _fail(message: str, error: Exception, debug: bool) -> None:
    if debug:
        typer.echo(f"Debug - {message}: {error!r}", err=True)
    else:
        typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(1) from None


def process_text_input(text: str | None) -> str:
    """Process text input and return the text to synthesize.

    Args:
        text: Optional text input from CLI argument

    Returns:
        The text to synthesize

    Raises:
        ValueError: If no text is provided
    """
    if text is None:
        raise ValueError("No text provided")

    return text


@app.command()
def serve(
    host: str | None = typer.Option(
        None, "--host", help="Bind address (from config if omitted)"
    ),
    port: int | None = typer.Option(
        None, "--port", help="Port (from config if omitted)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Run the station-audio HTTP server."""
    _configure_logging(debug)
    from .server import serve as run_server

    try:
        config = load_config()
        asyncio.run(
            run_server(
                config,
                host=host,
                port=port,
                log_level="debug" if debug else "info",
            )
        )
    except KeyboardInterrupt:
        typer.echo("Server stopped")
    except TTSAuthError as e:
        _fail("Authentication error", e, debug)
    except (ValueError, KeyError) as e:
        _fail("Configuration error", e, debug)


@app.command()
def speak(
    text: str | None = typer.Argument(None, help="Text to convert to speech"),
    file: Path | None = typer.Option(None, "-f", "--file", help="Read text from file"),
    output: Path = typer.Option(..., "-o", "--output", help="File to save the MP3 to"),
    voice: str | None = typer.Option(
        None, "-v", "--voice", help="Voice ID (default voice if omitted)"
    ),
    provider: str | None = typer.Option(
        None, "-p", "--provider", help="TTS provider (from config if omitted)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show verbose error messages"),
) -> None:
    """Synthesize text to an MP3 file."""
    if debug:
        _configure_logging(debug)

    # Get text from argument, file, or stdin (in priority order)
    if text is None:
        if file:
            try:
                text = file.read_text()
            except (OSError, UnicodeDecodeError) as e:
                _fail(f"Failed to read {file}", e, debug)
        elif not sys.stdin.isatty():
            text = sys.stdin.read().strip()

    try:
        output_text = process_text_input(text)
        asyncio.run(
            speak_text(
                output_text,
                voice_id=voice,
                output_file=str(output),
                provider=provider,
            )
        )
    except TTSAuthError as e:
        _fail("Authentication error", e, debug)
    except TTSEmptyAudioError as e:
        _fail("Empty audio", e, debug)
    except TTSAPIError as e:
        _fail("TTS API error", e, debug)
    except OSError as e:
        _fail("File system error", e, debug)
    except (ValueError, KeyError) as e:
        _fail("Invalid input", e, debug)

    typer.echo(f"Audio saved to {output}")


@app.command()
def voices(
    provider: str | None = typer.Option(
        None, "-p", "--provider", help="TTS provider (from config if omitted)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show verbose error messages"),
) -> None:
    """List available voices as 'Name: voice_id'."""
    try:
        available = asyncio.run(list_available_voices(provider))
    except Exception as e:
        _fail("Failed to list voices", e, debug)

    for voice in available:
        typer.echo(f"{voice['name']}: {voice['id']}")


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write the default config file."""
    if settings.CONFIG_PATH.exists() and not force:
        typer.echo(
            f"Config already exists at {settings.CONFIG_PATH} "
            "(use --force to overwrite)"
        )
        raise typer.Exit(1)

    path = generate_config()
    typer.echo(f"Generated {path}")
