"""CLI entry point for taskboard."""

from __future__ import annotations

from taskboard.cli.commands.root import cli


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
