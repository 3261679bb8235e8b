"""Terminal control for the interactive selector.

Owns the raw-mode lifecycle and alternate-screen switching. Input is read from
one descriptor while the screen is drawn on another, so the chosen path can
still go to a captured stdout.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty

ENTER_SCREEN = b"\x1b[?1049h\x1b[?25l"
LEAVE_SCREEN = b"\x1b[?25h\x1b[?1049l"


class TerminalController:
    """Manage terminal mode transitions for the selector session."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state and bind input/output file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)

    def enable_raw_mode(self) -> None:
        """Enter raw alternate-screen mode with the cursor hidden."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, ENTER_SCREEN)

    def disable_raw_mode(self) -> None:
        """Restore the saved tty attributes and the main screen buffer."""
        try:
            os.write(self.stdout_fd, LEAVE_SCREEN)
        finally:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def size(self) -> tuple[int, int]:
        """Return ``(columns, rows)`` of the output terminal."""
        try:
            term = os.get_terminal_size(self.stdout_fd)
        except OSError:
            term = shutil.get_terminal_size((80, 24))
        return max(1, term.columns), max(1, term.lines)

    def write(self, text: str) -> None:
        os.write(self.stdout_fd, text.encode("utf-8", errors="surrogateescape"))

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with raw-mode enter/exit calls."""
        try:
            self.enable_raw_mode()
            yield self
        finally:
            self.disable_raw_mode()
