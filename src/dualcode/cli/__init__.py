"""Command-line interface: typer app and rich display helpers."""
