"""Branch selector state machine and rendering.

The selector is a plain value. ``transition`` maps a state and a key name to
the next state and ``render`` draws a state, so neither needs a terminal.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence

from rich.text import Text

PAGE_SIZE = 10
DEFAULT_TITLE = "Select a branch to checkout:"

KEY_UP = "up"
KEY_DOWN = "down"
KEY_ENTER = "enter"
KEY_ESC = "esc"
KEY_BACKSPACE = "backspace"
KEY_CTRL_C = "ctrl+c"

UP_KEYS = (KEY_UP, "k")
DOWN_KEYS = (KEY_DOWN, "j")
QUIT_KEYS = ("q", KEY_CTRL_C)
FILTER_KEY = "/"

CURSOR_STYLE = "color(205)"
SELECTED_STYLE = "bold color(205)"

BROWSE_HELP = "(/ to filter, j/k to move, enter to select, q to quit)"
FILTERED_HELP = "(/ to filter, esc to clear, j/k to move, enter to select, q to quit)"
FILTER_HELP = "(type to filter, enter to keep, esc to cancel)"


class Mode(Enum):
    """Input mode."""

    BROWSING = "browsing"
    FILTERING = "filtering"


class OutcomeKind(Enum):
    """How a selector session ended."""

    SELECTED = "selected"
    CANCELLED = "cancelled"
    ERRORED = "errored"


@dataclass(frozen=True)
class Outcome:
    """Result of a finished selector session."""

    kind: OutcomeKind
    branch: Optional[str] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class SelectorState:
    """Everything the selector shows and remembers."""

    branches: tuple[str, ...]
    visible: tuple[str, ...]
    cursor: int = 0
    window_start: int = 0
    mode: Mode = Mode.BROWSING
    filter_text: str = ""
    filter_committed: bool = False
    outcome: Optional[Outcome] = None
    title: str = DEFAULT_TITLE

    @property
    def terminated(self) -> bool:
        return self.outcome is not None

    @property
    def current(self) -> Optional[str]:
        """Branch under the cursor, if any."""
        if not self.visible:
            return None
        return self.visible[self.cursor]


def initial_state(branches: Sequence[str], title: str = DEFAULT_TITLE) -> SelectorState:
    """Create a browsing state showing every branch."""
    branches = tuple(branches)
    return SelectorState(branches=branches, visible=branches, title=title)


def errored_state(error: Exception) -> SelectorState:
    """Create a finished state for a branch list that could not be fetched."""
    return SelectorState(branches=(), visible=(), outcome=Outcome(OutcomeKind.ERRORED, error=error))


def filter_branches(branches: Sequence[str], text: str) -> tuple[str, ...]:
    """Return the branches containing ``text``, ignoring case, in their original order."""
    if not text:
        return tuple(branches)
    needle = text.lower()
    return tuple(branch for branch in branches if needle in branch.lower())


def _is_printable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


def _show_all(state: SelectorState) -> SelectorState:
    return replace(
        state,
        visible=state.branches,
        cursor=0,
        window_start=0,
        mode=Mode.BROWSING,
        filter_text="",
        filter_committed=False,
    )


def _refilter(state: SelectorState, text: str) -> SelectorState:
    return replace(
        state,
        filter_text=text,
        visible=filter_branches(state.branches, text),
        cursor=0,
        window_start=0,
    )


def _move_up(state: SelectorState) -> SelectorState:
    cursor = max(0, state.cursor - 1)
    window_start = min(state.window_start, cursor)
    return replace(state, cursor=cursor, window_start=window_start)


def _move_down(state: SelectorState) -> SelectorState:
    if not state.visible:
        return state
    cursor = min(len(state.visible) - 1, state.cursor + 1)
    window_start = state.window_start
    if cursor >= window_start + PAGE_SIZE:
        window_start += 1
    return replace(state, cursor=cursor, window_start=window_start)


def _browse(state: SelectorState, key: str) -> SelectorState:
    if key in QUIT_KEYS:
        return replace(state, outcome=Outcome(OutcomeKind.CANCELLED))
    if key == KEY_ESC:
        if state.filter_committed:
            return _show_all(state)
        return replace(state, outcome=Outcome(OutcomeKind.CANCELLED))
    if key == FILTER_KEY:
        return replace(state, mode=Mode.FILTERING, filter_text="")
    if key in UP_KEYS:
        return _move_up(state)
    if key in DOWN_KEYS:
        return _move_down(state)
    if key == KEY_ENTER and state.visible:
        return replace(state, outcome=Outcome(OutcomeKind.SELECTED, branch=state.current))
    return state


def _filter(state: SelectorState, key: str) -> SelectorState:
    if key == KEY_ESC:
        return _show_all(state)
    if key == KEY_ENTER:
        return replace(state, mode=Mode.BROWSING, filter_committed=True)
    if key == KEY_BACKSPACE:
        if state.filter_text:
            return _refilter(state, state.filter_text[:-1])
        return state
    if _is_printable(key):
        return _refilter(state, state.filter_text + key)
    return state


def transition(state: SelectorState, key: str) -> SelectorState:
    """Apply one key press.

    Args:
        state: Current selector state
        key: Key name (``up``, ``enter``, ``esc``, ...) or a single character

    Returns:
        The next state. Finished states are returned unchanged.
    """
    if state.terminated:
        return state
    if state.mode is Mode.FILTERING:
        return _filter(state, key)
    return _browse(state, key)


def _footer(state: SelectorState) -> Text:
    text = Text()
    if state.mode is Mode.FILTERING:
        text.append(f"Filter: /{state.filter_text}_\n", style="bold")
        text.append(FILTER_HELP, style="dim")
    elif state.filter_committed:
        text.append(f"[Filtered: {state.filter_text}] ", style="cyan")
        text.append(FILTERED_HELP, style="dim")
    elif state.visible:
        text.append(BROWSE_HELP, style="dim")
    else:
        text.append("(q to quit)", style="dim")
    return text


def render(state: SelectorState) -> Text:
    """Draw a selector state as styled text."""
    if state.outcome is not None and state.outcome.kind is OutcomeKind.ERRORED:
        return Text(f"Error: {state.outcome.error}", style="red")

    text = Text()
    if not state.visible:
        if state.mode is Mode.FILTERING or state.filter_committed:
            text.append("No branches match filter.\n\n")
        else:
            text.append("No branches found.\n\n")
        text.append_text(_footer(state))
        return text

    end = min(state.window_start + PAGE_SIZE, len(state.visible))
    text.append(state.title, style="bold")
    if len(state.visible) > PAGE_SIZE:
        text.append(f" [{state.window_start + 1}-{end} of {len(state.visible)}]", style="dim")
    text.append("\n\n")

    for index in range(state.window_start, end):
        branch = state.visible[index]
        if index == state.cursor:
            text.append("›", style=CURSOR_STYLE)
            text.append(" ")
            text.append(branch, style=SELECTED_STYLE)
        else:
            text.append(f"  {branch}")
        text.append("\n")

    text.append("\n")
    text.append_text(_footer(state))
    return text
