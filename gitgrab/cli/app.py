from __future__ import annotations

import typer

from gitgrab.cli.commands.grab import grab


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="GitGrab clones all GitHub repositories from a specified organization to a local directory.",
)

app.command()(grab)


def main() -> None:
    app()
