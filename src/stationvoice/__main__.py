"""Entry point for running stationvoice as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the stationvoice CLI application."""
    app()


if __name__ == "__main__":
    main()
