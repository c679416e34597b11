"""Console script for ascii_video."""

import typer

from ascii_video.convert_video.cli import convert

app = typer.Typer()

app.command()(convert)


@app.command()
def version():
    """Display version information."""
    typer.echo("ASCII Video v0.1.0")
    raise typer.Exit()


if __name__ == "__main__":
    app()
