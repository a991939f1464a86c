"""Main entry point for the Schemacov CLI."""

from schemacov.cli import cli


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
