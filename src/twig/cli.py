"""Command line interface for twig."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from twig.config import Config
from twig.git import CheckoutError, GitRepo, Scope, SourceError
from twig.logging_config import get_logger, setup_logging
from twig.selector import DEFAULT_TITLE, OutcomeKind, SelectorState, errored_state, initial_state
from twig.terminal import TerminalError, select_branch

app = typer.Typer(help="Check out a recently active git branch")
console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)

REMOTE_TITLE = "Select a remote branch to checkout:"


def load_branches(path: Path, scope: Scope) -> tuple[Optional[GitRepo], SelectorState]:
    """Open the repository and build the selector's starting state."""
    title = REMOTE_TITLE if scope is Scope.REMOTE else DEFAULT_TITLE
    try:
        repo = GitRepo(path)
        return repo, initial_state(repo.get_recent_branches(scope), title=title)
    except SourceError as err:
        logger.debug("Could not list branches: %s", err)
        return None, errored_state(err)


@app.command()
def main(
    remote: bool = typer.Option(False, "--remote", "-r", help="List remote branches"),
) -> None:
    """Pick a recently active branch and check it out."""
    try:
        config = Config.from_env()
        setup_logging(debug=config.debug, log_file=config.log_file)
    except (ValueError, OSError) as err:
        err_console.print(f"[red]Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err
    scope = Scope.REMOTE if remote else Scope.LOCAL

    repo, state = load_branches(Path("."), scope)

    try:
        state = select_branch(state, console)
    except (TerminalError, EOFError) as err:
        err_console.print(f"[red]Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err

    outcome = state.outcome
    if outcome.kind is OutcomeKind.ERRORED:
        err_console.print(f"[red]Error:[/red] {escape(str(outcome.error))}")
        raise typer.Exit(code=1)
    if outcome.kind is OutcomeKind.CANCELLED:
        logger.info("Selection cancelled")
        return

    console.print(f"Checking out: [cyan]{escape(outcome.branch)}[/cyan]", highlight=False)
    try:
        checked_out = repo.checkout(outcome.branch, scope)
    except CheckoutError as err:
        err_console.print(f"[red]Failed to checkout branch:[/red] {escape(str(err))}", highlight=False)
        raise typer.Exit(code=1) from err
    console.print(f"[green]Switched to branch[/green] [cyan]{escape(checked_out)}[/cyan]", highlight=False)


if __name__ == "__main__":
    app()
