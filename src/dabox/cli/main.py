"""Main CLI entry point for dabox."""  # pragma: no cover

from dabox.cli.app import app  # pragma: no cover

# Register commands
from dabox.cli.commands import directory  # noqa: F401  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
