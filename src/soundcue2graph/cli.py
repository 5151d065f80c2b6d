"""soundcue2graph command line interface."""

from pathlib import Path
from typing import Optional

import typer

from . import __version__
from .export import convert_file
from .log import configure_logging
from .records import InputError

app = typer.Typer(
    name="soundcue2graph",
    help="Convert SoundCue JSON exports into pasteable SoundCue graph text.",
    no_args_is_help=True,
)


@app.command()
def convert(
    input_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="SoundCue JSON export to convert.",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the graph text here instead of stdout.",
    ),
    guids: bool = typer.Option(
        True,
        "--guids/--no-guids",
        help="Render random node GUIDs (--no-guids renders all zeros).",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Seed identifier generation for reproducible output.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log conversion details to stderr.",
    ),
) -> None:
    """Convert a SoundCue JSON export."""
    configure_logging(level="DEBUG" if verbose else "WARNING")

    try:
        text = convert_file(str(input_file), include_identity_tokens=guids, seed=seed)
    except InputError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if output is None:
        typer.echo(text, nl=False)
        return
    output.write_text(text, encoding="utf-8")
    typer.echo(f"Wrote {output}", err=True)


@app.command()
def version() -> None:
    """Show the soundcue2graph version."""
    typer.echo(f"soundcue2graph {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
