"""Widget helpers shared by the terminal views: key codes, checkboxes, key bars."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from freespace.theme import Style, Theme


class Key(enum.Enum):
    """Non-character keys. Character keys are plain one-letter strings."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    ENTER = "enter"
    ESC = "esc"
    BACKSPACE = "backspace"
    TAB = "tab"


KeyCode = Key | str


class KeyModifiers(enum.Flag):
    """Modifier keys held while a key was pressed."""

    NONE = 0
    SHIFT = enum.auto()
    CONTROL = enum.auto()
    ALT = enum.auto()


class CheckState(enum.Enum):
    """Selection state of a checkbox."""

    NONE = "none"
    ALL = "all"
    PARTIAL = "partial"


@dataclass(frozen=True)
class Span:
    """A run of text drawn in a single style."""

    text: str
    style: Style = field(default_factory=Style)


_EMACS_KEYS: dict[str, Key] = {
    "n": Key.DOWN,
    "p": Key.UP,
    "f": Key.RIGHT,
    "b": Key.LEFT,
}

_CHECKBOXES: dict[CheckState, str] = {
    CheckState.NONE: "[ ]",
    CheckState.ALL: "[x]",
    CheckState.PARTIAL: "[~]",
}

# Checked in order; the first keyword found in the lower-cased name wins.
_ICONS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("xcode",), "\U0001f528"),
    (("npm", "yarn", "pnpm"), "\U0001f4e6"),
    (("homebrew", "brew"), "\U0001f37a"),
    (("docker",), "\U0001f433"),
    (("cache",), "\U0001f5c2\ufe0f"),
)
_DEFAULT_ICON = "\U0001f4c1"


def keybinding_bar(bindings: list[tuple[str, str]], theme: Theme) -> list[Span]:
    """Build a key bar of the form ``[key] action │ [key] action``.

    Brackets and actions use the border colour, keys the accent colour.
    """
    muted = theme.style_border()
    accent = theme.style_size()
    spans = [Span(" ")]
    for position, (key, action) in enumerate(bindings):
        if position:
            spans.append(Span(" \u2502 ", muted))
        spans.extend(
            (Span("[", muted), Span(key, accent), Span("] ", muted), Span(action, muted))
        )
    return spans


def module_icon(name: str) -> str:
    """Pick an emoji icon for a module from keywords in its name."""
    lower = name.lower()
    for keywords, icon in _ICONS:
        if any(keyword in lower for keyword in keywords):
            return icon
    return _DEFAULT_ICON


def checkbox_str(state: CheckState) -> str:
    """Return the checkbox text for a selection state."""
    return _CHECKBOXES[state]


def normalize_emacs_key(code: KeyCode, modifiers: KeyModifiers) -> KeyCode:
    """Map Ctrl+N/P/F/B to Down/Up/Right/Left; other keys pass through."""
    if KeyModifiers.CONTROL in modifiers and isinstance(code, str):
        return _EMACS_KEYS.get(code, code)
    return code