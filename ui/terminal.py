# ui/terminal.py
from __future__ import annotations
import contextlib
import os
import sys
from typing import List

from PySide6.QtCore import QObject, QSocketNotifier, Signal

_ESCAPES = {
    b"\x1b[A": "up",
    b"\x1b[B": "down",
    b"\x1b[C": "right",
    b"\x1b[D": "left",
    b"\x1bOA": "up",
    b"\x1bOB": "down",
    b"\x1bOC": "right",
    b"\x1bOD": "left",
}


def decode_keys(data: bytes) -> List[str]:
    """
    Turn a chunk read from a cbreak-mode tty into key names.

    Printable characters come back as themselves ("space" for " "); the
    named keys are up, down, left, right, enter, backspace, esc and ctrl+c.
    Anything else (other control bytes, unknown escape sequences) is dropped.
    """
    keys: List[str] = []
    text = data
    i = 0
    while i < len(text):
        b = text[i:i + 1]
        if b == b"\x1b":
            seq = text[i:i + 3]
            if seq in _ESCAPES:
                keys.append(_ESCAPES[seq])
                i += 3
                continue
            if len(seq) >= 2 and seq[1:2] in (b"[", b"O"):
                # unknown CSI/SS3 sequence: skip through its final byte
                j = i + 2
                while j < len(text) and not (0x40 <= text[j] <= 0x7E):
                    j += 1
                i = j + 1
                continue
            keys.append("esc")
            i += 1
            continue
        if b in (b"\r", b"\n"):
            keys.append("enter")
        elif b in (b"\x7f", b"\x08"):
            keys.append("backspace")
        elif b == b"\x03":
            keys.append("ctrl+c")
        elif b == b" ":
            keys.append("space")
        elif text[i] >= 0x20:
            # decode one utf-8 character
            width = 1
            lead = text[i]
            if lead >= 0xF0:
                width = 4
            elif lead >= 0xE0:
                width = 3
            elif lead >= 0xC0:
                width = 2
            ch = text[i:i + width].decode("utf-8", errors="ignore")
            if ch:
                keys.append(ch)
            i += width
            continue
        i += 1
    return keys


def incomplete_utf8_tail(data: bytes) -> int:
    """Number of trailing bytes that start a utf-8 character the chunk cuts short."""
    for back in range(1, min(4, len(data)) + 1):
        lead = data[-back]
        if lead & 0xC0 == 0x80:
            continue
        if lead >= 0xF0:
            need = 4
        elif lead >= 0xE0:
            need = 3
        elif lead >= 0xC0:
            need = 2
        else:
            return 0
        return back if back < need else 0
    return 0


@contextlib.contextmanager
def raw_terminal(stream=None):
    """cbreak mode for the duration of the block; a no-op when not a tty."""
    stream = stream or sys.stdin
    if not stream.isatty():
        yield
        return
    import termios
    import tty

    fd = stream.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        # ctrl+c arrives as a byte instead of SIGINT
        attrs = termios.tcgetattr(fd)
        attrs[3] &= ~termios.ISIG
        termios.tcsetattr(fd, termios.TCSADRAIN, attrs)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


class KeyReader(QObject):
    keyPressed = Signal(str)

    def __init__(self, fd: int = None, parent=None):
        super().__init__(parent)
        self.fd = sys.stdin.fileno() if fd is None else fd
        self._pending = b""
        self._notifier = QSocketNotifier(self.fd, QSocketNotifier.Type.Read, self)
        self._notifier.activated.connect(self._on_ready)

    def setEnabled(self, enabled: bool):
        self._notifier.setEnabled(enabled)

    def _on_ready(self, *_):
        try:
            data = os.read(self.fd, 64)
        except OSError:
            return
        if not data:
            self._notifier.setEnabled(False)
            return
        data = self._pending + data
        # a multi-byte character may straddle two reads
        cut = len(data) - incomplete_utf8_tail(data)
        data, self._pending = data[:cut], data[cut:]
        for key in decode_keys(data):
            self.keyPressed.emit(key)
