"""Minimal STOMP 1.2 frame codec.

Frames look like ``COMMAND\\nname:value\\n...\\n\\nbody\\0``. Header escaping
applies to every command except CONNECT and CONNECTED. When a header repeats,
the first occurrence wins.
"""

from __future__ import annotations

from dataclasses import dataclass, field

NULL = "\x00"

CLIENT_COMMANDS = frozenset(
    {"CONNECT", "STOMP", "SEND", "SUBSCRIBE", "UNSUBSCRIBE", "ACK", "NACK", "BEGIN", "COMMIT", "ABORT", "DISCONNECT"}
)
SERVER_COMMANDS = frozenset({"CONNECTED", "MESSAGE", "RECEIPT", "ERROR"})
_UNESCAPED_COMMANDS = frozenset({"CONNECT", "CONNECTED"})

_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r", ":": "\\c"}
_UNESCAPES = {"\\": "\\", "n": "\n", "r": "\r", "c": ":"}


class FrameError(ValueError):
    """Raised when inbound text is not a well-formed frame."""


@dataclass
class Frame:
    command: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""


def escape_header(value: str) -> str:
    return "".join(_ESCAPES.get(char, char) for char in value)


def unescape_header(value: str) -> str:
    out: list[str] = []
    chars = iter(value)
    for char in chars:
        if char != "\\":
            out.append(char)
            continue
        nxt = next(chars, None)
        if nxt is None or nxt not in _UNESCAPES:
            raise FrameError(f"Undefined escape sequence \\{nxt or ''}")
        out.append(_UNESCAPES[nxt])
    return "".join(out)


def decode(text: str) -> Frame | None:
    """Parse one frame. Returns None for a heart-beat (bare EOLs)."""
    if not text.strip("\r\n" + NULL):
        return None
    if NULL in text:
        text = text[: text.index(NULL)]
    text = text.lstrip("\r\n")

    head, sep, body = text.partition("\n\n")
    if not sep:
        head, sep, body = text.partition("\r\n\r\n")
    lines = head.replace("\r\n", "\n").split("\n")
    command = lines[0].strip()
    if command not in CLIENT_COMMANDS and command not in SERVER_COMMANDS:
        raise FrameError(f"Unknown command {command!r}")

    escaped = command not in _UNESCAPED_COMMANDS
    headers: dict[str, str] = {}
    for line in lines[1:]:
        if not line:
            continue
        name, colon, value = line.partition(":")
        if not colon:
            raise FrameError(f"Malformed header line {line!r}")
        if escaped:
            name, value = unescape_header(name), unescape_header(value)
        headers.setdefault(name, value)
    return Frame(command=command, headers=headers, body=body)


def encode(frame: Frame) -> str:
    escaped = frame.command not in _UNESCAPED_COMMANDS
    lines = [frame.command]
    for name, value in frame.headers.items():
        value = str(value)
        if escaped:
            name, value = escape_header(name), escape_header(value)
        lines.append(f"{name}:{value}")
    return "\n".join(lines) + "\n\n" + frame.body + NULL


def error_frame(message: str, detail: str = "", receipt_id: str | None = None) -> Frame:
    headers = {"message": message, "content-type": "text/plain"}
    if receipt_id:
        headers["receipt-id"] = receipt_id
    return Frame("ERROR", headers, detail)
