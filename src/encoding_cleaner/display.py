"""Terminal rendering of replacement and discovery context windows."""
from __future__ import annotations

from colorama import Back, Fore, Style

from encoding_cleaner.discovery import Finding
from encoding_cleaner.engine import AppliedMapping
from encoding_cleaner.extent import DEFAULT_CONTEXT, Snippet

_CONTROL_BYTES = bytes(range(0x20)) + b"\x7f"
_HIGH_BYTES = bytes(range(0x80, 0x100))


def sanitize(data: bytes, *, strip_high: bool = False) -> str:
    """Make context bytes safe to print on a terminal.

    Newlines become a visible ``\\n``; other control bytes are dropped.
    With ``strip_high`` every byte in 0x80-0xFF is dropped as well,
    otherwise they are decoded as UTF-8 with replacement characters.
    """
    data = data.replace(b"\n", b"\\n")
    drop = _CONTROL_BYTES + _HIGH_BYTES if strip_high else _CONTROL_BYTES
    return data.translate(None, drop).decode("utf-8", errors="replace")


def escape_bytes(data: bytes) -> str:
    """Quoted literal with printable ASCII kept and everything else as ``\\xHH``."""
    body = "".join(
        chr(b) if 0x20 <= b < 0x7F and b not in (0x22, 0x5C) else f"\\x{b:02X}"
        for b in data
    )
    return f'"{body}"'


class Painter:
    """Wraps text in ANSI colors, or passes it through when disabled."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def paint(self, text: str, *, fore: str = Fore.WHITE, back: str = "") -> str:
        if not self.enabled:
            return text
        return f"{fore}{back}{text}{Style.RESET_ALL}"

    def highlight(self, text: str, back: str) -> str:
        return self.paint(text, fore=Fore.WHITE, back=back)


def render_snippet(
    snippet: Snippet,
    painter: Painter,
    *,
    back: str,
    escape_match: bool = False,
    strip_high: bool = False,
) -> str:
    if escape_match:
        match = escape_bytes(snippet.match)
    else:
        match = sanitize(snippet.match)
    return (
        sanitize(snippet.pre, strip_high=strip_high)
        + painter.highlight(match, back)
        + sanitize(snippet.post, strip_high=strip_high)
    )


def render_applied(applied: AppliedMapping, painter: Painter) -> list[str]:
    """Header, first-occurrence before/after lines and the replaced count."""
    mapping = applied.mapping
    replacement = mapping.replacement_bytes or b""
    lines = [f"{mapping.sequence_id}: => {sanitize(replacement)} "]
    if applied.before is not None and applied.after is not None:
        lines.append(
            render_snippet(applied.before, painter, back=Back.RED, escape_match=True)
        )
        lines.append(render_snippet(applied.after, painter, back=Back.GREEN))
    lines.append(f"   ... (replaced {applied.count})")
    return lines


def render_finding(
    finding: Finding, painter: Painter, *, context: int = DEFAULT_CONTEXT,
) -> str:
    snippet = finding.extent.in_context(context)
    body = render_snippet(
        snippet, painter, back=Back.RED, escape_match=True, strip_high=True,
    )
    return f"{finding.sequence_id}: {body}"
