"""Command-line interface for asr-correct.

Uses Typer for a type-hinted CLI and rich for output.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from asr_correct import __version__
from asr_correct.alignment import alignment_distance
from asr_correct.config import CorrectorConfig, build_config, load_config
from asr_correct.corrector import SentenceCorrector
from asr_correct.errors import CorrectorError, format_error_for_display
from asr_correct.logging import LogLevel, set_verbosity
from asr_correct.store import load_corpus
from asr_correct.tokenizer import TokenSequence, tokenize as tokenize_line

app = typer.Typer(
    name="asr-correct",
    help="Correct speech recognizer output against a corpus of trusted sentences.",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


class State:
    """Options shared by every command."""

    config_path: Path | None = None


state = State()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"asr-correct version {__version__}")
        raise typer.Exit()


def _fail(error: Exception) -> None:
    console.print(f"[red]Error:[/red] {escape(format_error_for_display(error))}", highlight=False)
    raise typer.Exit(1)


def _load_config(threshold: float | None = None) -> CorrectorConfig:
    config = load_config(state.config_path) if state.config_path else CorrectorConfig()
    if threshold is not None:
        config = build_config(config.model_dump(), rejection_threshold=threshold)
    return config


@app.callback()
def main(
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="JSON configuration file"),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase log output (-vv for debug)"),
    ] = 0,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """ASR Correct - corpus-based correction of recognizer hypotheses.

    [bold]tokenize[/bold]: show how a line is split into tokens

    [bold]align[/bold]: show the edit distance matrix between two lines

    [bold]correct[/bold]: correct hypotheses against a corpus directory
    """
    state.config_path = config
    set_verbosity(LogLevel(min(LogLevel.NORMAL + verbose, LogLevel.DEBUG)))


@app.command()
def tokenize(
    line: Annotated[str, typer.Argument(help="Text line to tokenize")],
) -> None:
    """Print the tokens of a line, one per row."""
    try:
        config = _load_config()
    except CorrectorError as e:
        _fail(e)

    for index, token in enumerate(tokenize_line(line, config.tokenizer)):
        console.print(f"[dim]{index:>3}[/dim]  {escape(token)}", highlight=False)


@app.command()
def align(
    source: Annotated[str, typer.Argument(help="Source line (e.g. recognizer output)")],
    destination: Annotated[str, typer.Argument(help="Destination line (e.g. reference)")],
    chars: Annotated[
        bool,
        typer.Option("--chars", help="Align characters instead of word tokens"),
    ] = False,
    matrix: Annotated[
        bool,
        typer.Option("--matrix/--no-matrix", help="Print the distance matrix"),
    ] = True,
) -> None:
    """Align two lines and show the edit operations."""
    try:
        config = _load_config()
    except CorrectorError as e:
        _fail(e)

    if chars:
        source_items: list[str] = list(source)
        destination_items: list[str] = list(destination)
    else:
        source_items = list(TokenSequence(source, config.tokenizer).tokens)
        destination_items = list(TokenSequence(destination, config.tokenizer).tokens)

    alignment = alignment_distance(source_items, destination_items)

    console.print(f"[cyan]Distance:[/cyan] {alignment.distance}")

    table = Table(title="Edit operations")
    table.add_column("Operation", style="cyan")
    table.add_column("Source", style="white")
    table.add_column("Destination", style="green")

    for step in alignment.steps:
        source_item = source_items[step.source_index] if step.source_index is not None else ""
        destination_item = (
            destination_items[step.destination_index] if step.destination_index is not None else ""
        )
        style = "dim" if not step.is_edit else None
        table.add_row(step.kind.value, escape(source_item), escape(destination_item), style=style)

    console.print(table)

    if matrix:
        console.print()
        console.print(str(alignment), markup=False, highlight=False)


@app.command()
def correct(
    hypothesis: Annotated[
        str,
        typer.Argument(help="Recognizer hypothesis, or '-' to read one per line from stdin"),
    ],
    corpus_dir: Annotated[
        Path,
        typer.Option("--corpus", "-d", help="Corpus directory (sentences.txt, vocabulary.txt)"),
    ],
    threshold: Annotated[
        Optional[float],
        typer.Option("--threshold", "-t", help="Rejection threshold for normalized distance"),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print results as JSON lines"),
    ] = False,
) -> None:
    """Correct hypotheses against a corpus directory."""
    try:
        config = _load_config(threshold)
        corpus, vocabulary = load_corpus(corpus_dir, config.tokenizer)
        corrector = SentenceCorrector(corpus, vocabulary, config)
    except CorrectorError as e:
        _fail(e)

    if hypothesis == "-":
        hypotheses = [line.rstrip("\n") for line in sys.stdin]
    else:
        hypotheses = [hypothesis]

    for result in corrector.correct_all(hypotheses):
        if as_json:
            typer.echo(json.dumps(result.to_dict(), ensure_ascii=False))
            continue

        if result.applied:
            console.print(f"[green]{escape(result.text)}[/green]", highlight=False)
            console.print(
                f"  [dim]reference #{result.reference_index}: {escape(result.reference.text)} "
                f"(distance {result.distance}, {result.normalized_distance:.2f})[/dim]",
                highlight=False,
            )
        else:
            console.print(result.text, markup=False, highlight=False)


if __name__ == "__main__":
    app()
