"""Interactive fuzzy selection over ranked directories.

The selector is a small state machine: it stays in ``FILTERING`` while the
user edits the query, re-ranking the candidates from scratch after every key,
and ends in ``SELECTED`` or ``CANCELLED``. Key handling and rendering update a
``SelectorState`` in place (rendering only scrolls ``list_start``);
``interactive_select`` wires them to a tty.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from .ansi import HINT_STYLE, QUERY_STYLE, RESET, clip_ansi_line, highlight_span, selected_with_ansi
from .input import read_key
from .matcher import MatchCandidate, rank
from .terminal import TerminalController

PROMPT = "> "
PLACEHOLDER = "type to filter directories"
NO_MATCHES_MESSAGE = " no matching directories"

ACCEPT_KEYS = frozenset({"ENTER_CR", "ENTER_LF"})
CANCEL_KEYS = frozenset({"ESC", "CTRL_C", "CTRL_G", "CTRL_D", ""})
UP_KEYS = frozenset({"UP", "CTRL_P", "CTRL_K"})
DOWN_KEYS = frozenset({"DOWN", "CTRL_N", "TAB"})

logger = logging.getLogger(__name__)


class SelectionCancelled(Exception):
    """Raised when the user leaves the selector without choosing a path."""


class SelectorPhase(enum.Enum):
    FILTERING = "filtering"
    SELECTED = "selected"
    CANCELLED = "cancelled"


@dataclass
class SelectorState:
    entries: list[tuple[str, float]]
    query: str = ""
    phase: SelectorPhase = SelectorPhase.FILTERING
    matches: list[MatchCandidate] = field(default_factory=list)
    selected: int = 0
    list_start: int = 0
    choice: str | None = None

    @classmethod
    def create(cls, entries: list[tuple[str, float]], query: str = "") -> SelectorState:
        state = cls(entries=list(entries), query=query)
        refresh_matches(state)
        return state

    @property
    def current(self) -> MatchCandidate | None:
        if not self.matches:
            return None
        return self.matches[self.selected]


def refresh_matches(state: SelectorState) -> None:
    """Re-rank entries for the current query and move the highlight to the top."""
    state.matches = rank(state.query, state.entries)
    state.selected = 0
    state.list_start = 0


def move_selection(state: SelectorState, direction: int) -> bool:
    if not state.matches:
        return False
    prev_selected = state.selected
    state.selected = max(0, min(len(state.matches) - 1, state.selected + direction))
    return state.selected != prev_selected


def set_query(state: SelectorState, query: str) -> bool:
    if query == state.query:
        return False
    state.query = query
    refresh_matches(state)
    return True


def handle_key(state: SelectorState, key: str) -> bool:
    """Apply one key token to ``state``.

    Returns whether the screen needs to be redrawn. Keys are ignored once the
    selector has left ``FILTERING``.
    """
    if state.phase is not SelectorPhase.FILTERING:
        return False

    if key in CANCEL_KEYS:
        state.phase = SelectorPhase.CANCELLED
        return True
    if key in ACCEPT_KEYS:
        current = state.current
        if current is None:
            return False
        state.choice = current.path
        state.phase = SelectorPhase.SELECTED
        return True
    if key in UP_KEYS:
        return move_selection(state, -1)
    if key in DOWN_KEYS:
        return move_selection(state, 1)
    if key == "BACKSPACE":
        return set_query(state, state.query[:-1])
    if key == "CTRL_U":
        return set_query(state, "")
    if key == "CTRL_W":
        trimmed = state.query.rstrip(" /")
        cut = max(trimmed.rfind(" "), trimmed.rfind("/"))
        return set_query(state, trimmed[: cut + 1] if cut >= 0 else "")
    if len(key) == 1 and key.isprintable():
        return set_query(state, state.query + key)
    return False


def ensure_selected_visible(state: SelectorState, rows: int) -> None:
    rows = max(1, rows)
    if state.selected < state.list_start:
        state.list_start = state.selected
    elif state.selected >= state.list_start + rows:
        state.list_start = state.selected - rows + 1
    max_start = max(0, len(state.matches) - rows)
    state.list_start = max(0, min(state.list_start, max_start))


def _prompt_row(state: SelectorState) -> str:
    if state.query:
        text = f"{QUERY_STYLE}{PROMPT}{state.query}_{RESET}"
    else:
        text = f"{HINT_STYLE}{PROMPT}{PLACEHOLDER}{RESET}"
    return f"{text}{HINT_STYLE}  {len(state.matches)}/{len(state.entries)}{RESET}"


def _candidate_row(candidate: MatchCandidate, is_selected: bool) -> str:
    text = f" {highlight_span(candidate.path, candidate.span)} "
    return selected_with_ansi(text) if is_selected else text


def render_selector(state: SelectorState, width: int, height: int) -> str:
    """Build one full frame: prompt row then as many candidate rows as fit."""
    list_rows = max(1, height - 1)
    ensure_selected_visible(state, list_rows)

    rows = [_prompt_row(state)]
    if not state.matches:
        rows.append(f"{HINT_STYLE}{NO_MATCHES_MESSAGE}{RESET}")
    for idx in range(state.list_start, min(len(state.matches), state.list_start + list_rows)):
        rows.append(_candidate_row(state.matches[idx], idx == state.selected))

    out = ["\x1b[H"]
    for row_idx, row in enumerate(rows):
        if row_idx:
            out.append("\r\n")
        out.append(clip_ansi_line(row, width))
        out.append(f"{RESET}\x1b[K")
    out.append("\x1b[J")
    return "".join(out)


def interactive_select(
    entries: list[tuple[str, float]],
    stdin_fd: int,
    stdout_fd: int,
    *,
    terminal: TerminalController | None = None,
    read: Callable[[int], str] = read_key,
) -> str:
    """Run the selector on a tty and return the chosen path.

    Raises ``SelectionCancelled`` when the user aborts. Terminal ``OSError``s
    propagate after the tty has been restored.
    """
    state = SelectorState.create(entries)
    if terminal is None:
        terminal = TerminalController(stdin_fd, stdout_fd)

    with terminal.raw_mode():
        while state.phase is SelectorPhase.FILTERING:
            width, height = terminal.size()
            terminal.write(render_selector(state, width, height))
            handle_key(state, read(stdin_fd))

    if state.phase is SelectorPhase.CANCELLED or state.choice is None:
        logger.debug("selection cancelled (query %r)", state.query)
        raise SelectionCancelled()
    logger.debug("selected %s", state.choice)
    return state.choice
