"""Entry point for the ALINT-PRO LSP server."""

from alintlsp.cli import run


def main() -> None:
    """Run the server with command-line arguments."""
    raise SystemExit(run())


if __name__ == "__main__":
    main()
