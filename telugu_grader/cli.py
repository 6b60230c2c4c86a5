"""CLI entrypoint for telugu-grader command."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import load_config
from .normalize import normalize as normalize_text
from .normalize import split_candidates
from .replay import ReplayScript, run_replay
from .scorer import best_score
from .scorer import score as score_pair
from .types import TokenResult

app = typer.Typer(help="Match spoken Telugu against practice targets")
console = Console()

_STYLES = {
    TokenResult.CORRECT: "green",
    TokenResult.INCORRECT: "red",
    TokenResult.PENDING: "dim",
}


@app.callback()
def main(
    log_level: Annotated[Optional[str], typer.Option(help="Logging level (default from config)")] = None,
) -> None:
    """Configure logging for every command."""
    level = (log_level or load_config().log_level).upper()
    try:
        logging.basicConfig(
            level=level,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
            force=True,
        )
    except ValueError as e:
        console.print(f"[red]Invalid log level: {escape(str(e))}[/red]")
        raise typer.Exit(1)


@app.command()
def normalize(
    text: Annotated[str, typer.Argument(help="Text to normalize")],
) -> None:
    """Print the normalized form used for comparison."""
    console.print(normalize_text(text))


@app.command()
def score(
    spoken: Annotated[str, typer.Argument(help="Transcript fragment")],
    expected: Annotated[str, typer.Argument(help="Expected target token")],
    split: Annotated[bool, typer.Option(help="Score each spoken word and report the best")] = False,
) -> None:
    """Score a transcript against a target token."""
    config = load_config()
    if split:
        value = best_score(split_candidates(spoken), expected)
    else:
        value = score_pair(spoken, expected)

    single = value > config.progression.single_threshold
    sequential = value > config.progression.sequential_threshold
    console.print(f"[bold]{value:.3f}[/bold]")
    console.print(f"  drill ({config.progression.single_threshold}): {'pass' if single else 'fail'}")
    console.print(f"  reading ({config.progression.sequential_threshold}): {'pass' if sequential else 'fail'}")


@app.command()
def replay(
    input_file: Annotated[Path, typer.Argument(help="Replay script JSON")],
) -> None:
    """Replay recorded recognizer events and show per-word results."""
    try:
        script = ReplayScript.from_json_file(input_file)
        outcome = run_replay(script, load_config())
    except (OSError, ValueError, ValidationError) as e:
        console.print(f"[red]Invalid replay script: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    snapshot = outcome.snapshot

    table = Table(title=f"{script.mode} practice")
    table.add_column("#", justify="right")
    table.add_column("Target")
    table.add_column("Result")
    shown = outcome.targets if script.mode == "sequential" else [snapshot.current_target or ""]
    indices = range(len(shown)) if script.mode == "sequential" else [snapshot.current_index]
    for index, token in zip(indices, shown):
        result = snapshot.result_for(index)
        table.add_row(str(index), token, f"[{_STYLES[result]}]{result.value}[/{_STYLES[result]}]")
    console.print(table)

    for failure in outcome.errors:
        console.print(f"[red]{escape(str(failure))}[/red]")
    console.print(
        f"State: [bold]{snapshot.state.value}[/bold]  "
        f"Score: {snapshot.tally.correct}/{snapshot.tally.total}"
    )


@app.command("show-config")
def show_config() -> None:
    """Print the effective configuration."""
    console.print_json(load_config().model_dump_json())


if __name__ == "__main__":
    app()
