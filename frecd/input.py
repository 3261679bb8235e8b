"""Low-level terminal input decoding.

Reads raw bytes from the tty and translates them into normalized key tokens.
Handles ESC-sequence timing, arrow keys, and multi-byte UTF-8 text.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_CONTROL_KEYS = {
    b"\x03": "CTRL_C",
    b"\x04": "CTRL_D",
    b"\x07": "CTRL_G",
    b"\x0b": "CTRL_K",
    b"\x0e": "CTRL_N",
    b"\x10": "CTRL_P",
    b"\x15": "CTRL_U",
    b"\x17": "CTRL_W",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER_CR",
    b"\n": "ENTER_LF",
}

_ARROW_KEYS = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _read_utf8_tail(fd: int, lead: bytes) -> str:
    """Complete the character started by ``lead``.

    A byte that cannot start a character, or a sequence cut short by a
    non-continuation byte, yields ``"UNKNOWN"``; the interrupting byte is kept
    for the next read.
    """
    first = lead[0]
    if first < 0x80:
        return lead.decode("ascii")
    if not 0xC2 <= first <= 0xF4:
        return "UNKNOWN"
    data = lead
    for _ in range(_utf8_length(first) - 1):
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            break
        if not 0x80 <= part[0] <= 0xBF:
            _PENDING_BYTES.append(part)
            break
        data += part
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return "UNKNOWN"


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Block for the next key and return its token.

    Returns ``""`` on end of input or when ``timeout_ms`` elapses first.
    """
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    control = _CONTROL_KEYS.get(ch)
    if control is not None:
        return control

    if ch != b"\x1b":
        return _read_utf8_tail(fd, ch)

    # Escape / arrow key sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq not in {b"[", b"O"}:
        _PENDING_BYTES.append(seq)
        return "ESC"
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    arrow = _ARROW_KEYS.get(seq)
    if arrow is not None:
        return arrow
    # Swallow the rest of unsupported CSI sequences (e.g. ESC [ 3 ~).
    while seq is not None and not (b"@" <= seq <= b"~"):
        seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    return "UNKNOWN"
