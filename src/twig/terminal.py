"""Keyboard input and the interactive selector loop."""

import contextlib
import os
import select
import sys
import termios
import tty
from functools import partial
from typing import Callable, Iterator, TextIO

from rich.console import Console
from rich.live import Live

from twig.logging_config import get_logger
from twig.selector import (
    KEY_BACKSPACE,
    KEY_CTRL_C,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESC,
    KEY_UP,
    SelectorState,
    render,
    transition,
)

logger = get_logger(__name__)

# How long to wait for the rest of an escape sequence before treating it as a lone Esc
ESCAPE_TIMEOUT = 0.05
UNDECODABLE = "\ufffd"

KEY_SEQUENCES = {
    "\x1b[A": KEY_UP,
    "\x1bOA": KEY_UP,
    "\x1b[B": KEY_DOWN,
    "\x1bOB": KEY_DOWN,
    "\r": KEY_ENTER,
    "\n": KEY_ENTER,
    "\x7f": KEY_BACKSPACE,
    "\x08": KEY_BACKSPACE,
    "\x1b": KEY_ESC,
    "\x03": KEY_CTRL_C,
}


class TerminalError(Exception):
    """No interactive terminal to run the selector in."""


def key_name(sequence: str) -> str:
    """Map a raw input sequence to a key name.

    Sequences without a name are returned as they are, so ordinary
    characters come back unchanged.
    """
    return KEY_SEQUENCES.get(sequence, sequence)


def _ready(fd: int, timeout: float = ESCAPE_TIMEOUT) -> bool:
    readable, _, _ = select.select([fd], [], [], timeout)
    return bool(readable)


def _read_exact(fd: int, count: int) -> bytes:
    data = b""
    while len(data) < count:
        chunk = os.read(fd, count - len(data))
        if not chunk:
            break
        data += chunk
    return data


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _read_sequence(fd: int) -> str:
    first = os.read(fd, 1)
    if not first:
        raise EOFError("stdin closed")

    if first == b"\x1b":
        if not _ready(fd):
            return "\x1b"
        data = first + os.read(fd, 1)
        if data[-1:] in (b"[", b"O"):
            # CSI/SS3: read up to and including the final byte
            while _ready(fd):
                byte = os.read(fd, 1)
                data += byte
                if not byte or 0x40 <= byte[0] <= 0x7E:
                    break
        return data.decode("utf-8", errors="replace")

    data = first + _read_exact(fd, _utf8_length(first[0]) - 1)
    return data.decode("utf-8", errors="replace")


def read_key(fd: int) -> str:
    """Block until one key is pressed and return its name.

    Bytes that do not decode as UTF-8 are skipped.
    """
    try:
        sequence = _read_sequence(fd)
        while sequence == UNDECODABLE:
            sequence = _read_sequence(fd)
        return key_name(sequence)
    except KeyboardInterrupt:
        return KEY_CTRL_C


@contextlib.contextmanager
def cbreak_terminal(stream: TextIO) -> Iterator[int]:
    """Put a terminal in cbreak mode, restoring its settings on exit.

    cbreak keeps output processing on, so Rich's newlines still render.
    """
    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    tty.setcbreak(fd)
    try:
        yield fd
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def run_selector(state: SelectorState, console: Console, next_key: Callable[[], str]) -> SelectorState:
    """Draw the selector and feed it keys until it finishes.

    Args:
        state: Starting state
        console: Console to draw on
        next_key: Blocks for the next key name

    Returns:
        The finished state
    """
    if state.terminated:
        return state

    with Live(render(state), console=console, auto_refresh=False, transient=True) as live:
        while not state.terminated:
            key = next_key()
            logger.debug("Key pressed: %r", key)
            state = transition(state, key)
            live.update(render(state), refresh=True)

    logger.debug("Selector finished: %s", state.outcome)
    return state


def select_branch(state: SelectorState, console: Console) -> SelectorState:
    """Run the selector on the controlling terminal."""
    if state.terminated:
        return state
    if not sys.stdin.isatty():
        raise TerminalError("Branch selection requires an interactive terminal")

    with cbreak_terminal(sys.stdin) as fd:
        return run_selector(state, console, partial(read_key, fd))
