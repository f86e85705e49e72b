# mc_rcon/formatting.py
"""
Minecraft `§` formatting codes in server replies.

`§0`-`§f` pick a colour (and clear any styles, as the game does), `§k`-`§o`
add a style, `§r` resets both. Anything else after `§` is left alone.
"""
from __future__ import annotations

import re
from typing import List

from prompt_toolkit.formatted_text import FormattedText

SECTION = "§"

COLOR_CODES = {
    "0": "#000000",  # black
    "1": "#0000aa",  # dark_blue
    "2": "#00aa00",  # dark_green
    "3": "#00aaaa",  # dark_aqua
    "4": "#aa0000",  # dark_red
    "5": "#aa00aa",  # dark_purple
    "6": "#ffaa00",  # gold
    "7": "#aaaaaa",  # gray
    "8": "#555555",  # dark_gray
    "9": "#5555ff",  # blue
    "a": "#55ff55",  # green
    "b": "#55ffff",  # aqua
    "c": "#ff5555",  # red
    "d": "#ff55ff",  # light_purple
    "e": "#ffff55",  # yellow
    "f": "#ffffff",  # white
}

STYLE_CODES = {
    "k": "blink",      # obfuscated
    "l": "bold",
    "m": "strike",
    "n": "underline",
    "o": "italic",
}

RESET_CODE = "r"

_CODE = re.compile(SECTION + "([0-9a-fk-or])", re.IGNORECASE)


def _style(color: str, styles: List[str]) -> str:
    parts = [f"fg:{color}"] if color else []
    return " ".join(parts + styles)


def to_formatted_text(text: str) -> FormattedText:
    """Translate formatting codes into prompt_toolkit (style, text) fragments."""
    fragments = []
    color = ""
    styles: List[str] = []
    pos = 0
    for m in _CODE.finditer(text):
        if m.start() > pos:
            fragments.append((_style(color, styles), text[pos:m.start()]))
        code = m.group(1).lower()
        if code in COLOR_CODES:
            color, styles = COLOR_CODES[code], []
        elif code in STYLE_CODES:
            if STYLE_CODES[code] not in styles:
                styles.append(STYLE_CODES[code])
        else:
            color, styles = "", []
        pos = m.end()
    if pos < len(text):
        fragments.append((_style(color, styles), text[pos:]))
    return FormattedText(fragments)


def strip_codes(text: str) -> str:
    return _CODE.sub("", text)
