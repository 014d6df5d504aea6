"""Main CLI entry point for fsdb."""  # pragma: no cover

from fsdb.cli.app import app  # pragma: no cover

# Register commands
from fsdb.cli.commands import status, sync, watch  # pragma: no cover

__all__ = ["app", "status", "sync", "watch"]  # pragma: no cover


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
