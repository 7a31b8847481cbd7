"""
Issue/task theme colours.

Tasks and issues share one resolution path so a task without its own colour
renders in exactly its issue's colour.
"""

import re

ISSUE_THEME_PALETTE: tuple[str, ...] = (
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#96CEB4",
    "#FFEAA7",
    "#DDA0DD",
    "#98D8C8",
    "#F7DC6F",
    "#BB8FCE",
    "#85C1E9",
)

ISSUE_SURFACE_TINT = 0.82
"""Row background: the issue colour mixed this far toward white."""

ISSUE_OVERLAY_ALPHA = 0.18
"""Opacity of the issue colour laid over highlighted cells."""

_HEX_REGEX = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def _string_hash(text: str) -> int:
    """32-bit signed shift-subtract hash over UTF-16 code units."""
    encoded = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        h = (h * 31 + code_unit) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def pick_issue_theme_color(key: str | None) -> str:
    """Deterministic palette colour for an identity key; blank keys get the first colour."""
    normalized = (key or "").strip()
    if not normalized:
        return ISSUE_THEME_PALETTE[0]
    return ISSUE_THEME_PALETTE[abs(_string_hash(normalized)) % len(ISSUE_THEME_PALETTE)]


def resolve_issue_theme_color(explicit_color: str | None, fallback_key: str | None) -> str:
    """An explicit colour wins; otherwise hash the fallback key."""
    normalized = explicit_color.strip() if isinstance(explicit_color, str) else ""
    if normalized:
        return normalized
    return pick_issue_theme_color(fallback_key if isinstance(fallback_key, str) else None)


def _parse_hex(color: str) -> tuple[int, int, int] | None:
    match = _HEX_REGEX.match(color.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def tint_theme_color(color: str, ratio: float) -> str:
    """
    Mix a hex colour toward white.

    ratio 0 returns the colour, 1 returns white. Non-hex input is returned as-is.
    """
    rgb = _parse_hex(color)
    if rgb is None:
        return color
    ratio = min(max(ratio, 0.0), 1.0)
    r, g, b = (round(c + (255 - c) * ratio) for c in rgb)
    return f"#{r:02X}{g:02X}{b:02X}"


def transparentize_theme_color(color: str, alpha: float) -> str:
    """rgba() form of a hex colour. Non-hex input is returned as-is."""
    rgb = _parse_hex(color)
    if rgb is None:
        return color
    alpha = min(max(alpha, 0.0), 1.0)
    return f"rgba({rgb[0]}, {rgb[1]}, {rgb[2]}, {alpha:g})"
