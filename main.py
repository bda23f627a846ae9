"""Main entrypoint for the import review command-line client.

This module exposes the Typer application so the client can be started with ``python main.py`` or
``uv run main.py`` from a checkout, in addition to the installed ``import-review`` console script.
"""

from import_review.cli import app

if __name__ == "__main__":
    app()
