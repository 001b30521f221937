"""Interactive terminal screen for choosing which modules to install."""

from __future__ import annotations

import curses
import enum
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError, version

from freespace.manifest import Module
from freespace.theme import RESET, Color, Style, Theme
from freespace.widgets import (
    CheckState,
    Key,
    KeyCode,
    KeyModifiers,
    Span,
    checkbox_str,
    keybinding_bar,
    normalize_emacs_key,
)

_HIGHLIGHT = "\u25b6 "
_CHECK_WIDTH = 5
_DIR_WIDTH = 30
_POLL_MS = 250

_BINDINGS = [
    ("space", "toggle"),
    ("a", "all"),
    ("n", "none"),
    ("enter", "confirm"),
    ("esc", "cancel"),
]


class SelectionCancelled(Exception):
    """The user left the selection screen without confirming."""

    def __init__(self) -> None:
        super().__init__("user cancelled installation")


class KeyResult(enum.Enum):
    """What a key press asks the selection screen to do next."""

    CONTINUE = "continue"
    CONFIRM = "confirm"
    CANCEL = "cancel"


@dataclass
class InstallSelectState:
    """Candidates, their selection flags and the cursor of the selection screen."""

    candidates: list[tuple[str, str]]
    selected: list[bool] | None = None
    cursor: int = 0
    theme: Theme = field(default_factory=Theme)
    palette: dict[Style, int] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.selected is None:
            self.selected = [True] * len(self.candidates)
        if len(self.selected) != len(self.candidates):
            raise ValueError("selected flags must match the candidates")

    @classmethod
    def from_modules(cls, modules: list[tuple[str, Module]]) -> InstallSelectState:
        """Build a state with every module selected, from (dir_name, module) pairs."""
        return cls(candidates=[(module.name, dir_name) for dir_name, module in modules])

    def handle_key(self, code: KeyCode, modifiers: KeyModifiers) -> KeyResult:
        """Apply a key press and report whether to continue, confirm or cancel."""
        if code == "c" and KeyModifiers.CONTROL in modifiers:
            return KeyResult.CANCEL

        code = normalize_emacs_key(code, modifiers)
        count = len(self.candidates)

        if code in (Key.ESC, "q"):
            return KeyResult.CANCEL
        if code == Key.ENTER:
            return KeyResult.CONFIRM
        if code in ("j", Key.DOWN):
            if count:
                self.cursor = (self.cursor + 1) % count
        elif code in ("k", Key.UP):
            if count:
                self.cursor = (self.cursor + count - 1) % count
        elif code == " ":
            if count:
                self.selected[self.cursor] = not self.selected[self.cursor]
        elif code == "a":
            self.selected = [True] * count
        elif code == "n":
            self.selected = [False] * count
        return KeyResult.CONTINUE

    def selected_indices(self) -> list[int]:
        """Indices of the selected candidates, in order."""
        return [index for index, chosen in enumerate(self.selected) if chosen]

    def status_text(self) -> str:
        """Selection count shown in the status bar."""
        return f"{sum(self.selected)}/{len(self.candidates)} selected"

    def render(self, screen) -> None:
        """Draw the screen onto a curses window."""
        screen.erase()
        height, width = screen.getmaxyx()
        if height < 1 or width < 1:
            return

        status_y = height - 1
        if height >= 5 and width >= 10:
            border = self._attr(self.theme.style_border())
            _draw_box(screen, 0, 3, width, border)
            self._draw_spans(
                screen, 1, 1,
                [Span(" Select modules to install ", self.theme.style_header())],
                width - 2,
            )
            table_height = status_y - 3
            _draw_box(screen, 3, table_height, width, border)
            self._draw_rows(screen, 4, table_height - 2, width - 2)

        self._draw_status(screen, status_y, width)

    def _draw_rows(self, screen, top: int, visible: int, inner_width: int) -> None:
        if visible <= 0:
            return
        offset = max(0, self.cursor - visible + 1)
        name_width = max(inner_width - len(_HIGHLIGHT) - _CHECK_WIDTH - 1 - _DIR_WIDTH, 0)
        normal = self.theme.style_normal()
        shown = range(offset, min(offset + visible, len(self.candidates)))

        for row, index in enumerate(shown):
            name, dir_name = self.candidates[index]
            state = CheckState.ALL if self.selected[index] else CheckState.NONE
            is_cursor = index == self.cursor
            cells = [
                Span(_HIGHLIGHT if is_cursor else " " * len(_HIGHLIGHT), normal),
                Span(f"{checkbox_str(state):<{_CHECK_WIDTH}}", normal),
                Span(f"{name[:name_width]:<{name_width}} ", normal),
                Span(f"{dir_name[:_DIR_WIDTH]:<{_DIR_WIDTH}}", self.theme.style_description()),
            ]
            if is_cursor:
                selected = self.theme.style_selected().with_bold()
                text = "".join(cell.text for cell in cells)
                cells = [Span(f"{text:<{inner_width}}", selected)]
            self._draw_spans(screen, top + row, 1, cells, inner_width)

    def _draw_status(self, screen, y: int, width: int) -> None:
        label = _version_label()
        left_width = width - len(label) if len(label) < width else width
        spans = keybinding_bar(_BINDINGS, self.theme)
        spans.append(Span(" \u2502 ", self.theme.style_border()))
        spans.append(Span(self.status_text(), self.theme.style_size()))
        self._draw_spans(screen, y, 0, spans, left_width)
        if len(label) < width:
            _put(screen, y, width - len(label), label, len(label),
                 self._attr(self.theme.style_border()))

    def _draw_spans(self, screen, y: int, x: int, spans: list[Span], limit: int) -> None:
        used = 0
        for span in spans:
            room = limit - used
            if room <= 0:
                break
            text = span.text[:room]
            _put(screen, y, x + used, text, len(text), self._attr(span.style))
            used += len(text)

    def _attr(self, style: Style) -> int:
        fallback = curses.A_BOLD if style.bold else curses.A_NORMAL
        return self.palette.get(style, fallback)


def run_install_select(modules: list[tuple[str, Module]]) -> list[int]:
    """Let the user pick modules interactively; return the chosen indices.

    Raises SelectionCancelled if the user presses Esc, q or Ctrl+C.
    """
    state = InstallSelectState.from_modules(modules)
    try:
        return curses.wrapper(_event_loop, state)
    except KeyboardInterrupt:
        raise SelectionCancelled() from None


def _event_loop(screen, state: InstallSelectState) -> list[int]:
    curses.raw()
    screen.keypad(True)
    screen.timeout(_POLL_MS)
    try:
        curses.curs_set(0)
    except curses.error:
        pass
    state.palette = _build_palette(state.theme)

    while True:
        state.render(screen)
        screen.refresh()
        try:
            pressed = screen.get_wch()
        except curses.error:
            continue
        translated = _translate_key(pressed)
        if translated is None:
            continue
        result = state.handle_key(*translated)
        if result is KeyResult.CONFIRM:
            return state.selected_indices()
        if result is KeyResult.CANCEL:
            raise SelectionCancelled()


def _translate_key(pressed: int | str) -> tuple[KeyCode, KeyModifiers] | None:
    """Turn a curses key into a key code and modifiers; None for keys to ignore."""
    if isinstance(pressed, int):
        key = _curses_keys().get(pressed)
        return (key, KeyModifiers.NONE) if key is not None else None
    special = {
        "\n": Key.ENTER,
        "\r": Key.ENTER,
        "\x1b": Key.ESC,
        "\t": Key.TAB,
        "\x7f": Key.BACKSPACE,
        "\x08": Key.BACKSPACE,
    }
    if pressed in special:
        return special[pressed], KeyModifiers.NONE
    if len(pressed) == 1 and 1 <= ord(pressed) <= 26:
        return chr(ord(pressed) + ord("a") - 1), KeyModifiers.CONTROL
    return pressed, KeyModifiers.NONE


def _curses_keys() -> dict[int, Key]:
    return {
        curses.KEY_UP: Key.UP,
        curses.KEY_DOWN: Key.DOWN,
        curses.KEY_LEFT: Key.LEFT,
        curses.KEY_RIGHT: Key.RIGHT,
        curses.KEY_ENTER: Key.ENTER,
        curses.KEY_BACKSPACE: Key.BACKSPACE,
    }


def _build_palette(theme: Theme) -> dict[Style, int]:
    if not curses.has_colors():
        return {}
    curses.start_color()
    try:
        curses.use_default_colors()
    except curses.error:
        pass

    styles = [
        theme.style_normal(),
        theme.style_selected(),
        theme.style_header(),
        theme.style_size(),
        theme.style_border(),
        theme.style_description(),
    ]
    palette: dict[Style, int] = {}
    for number, style in enumerate(dict.fromkeys(styles), start=1):
        if number >= curses.COLOR_PAIRS:
            break
        curses.init_pair(number, _curses_color(style.fg), _curses_color(style.bg))
        attr = curses.color_pair(number)
        if style.bold:
            attr |= curses.A_BOLD
        palette[style] = attr
    return palette


def _curses_color(color: Color | None) -> int:
    if color is None or color == RESET:
        return -1
    if isinstance(color, int) and color < curses.COLORS:
        return color
    return -1


def _draw_box(screen, top: int, height: int, width: int, attr: int) -> None:
    if height < 2 or width < 2:
        return
    horizontal = "\u2500" * (width - 2)
    _put(screen, top, 0, f"\u250c{horizontal}\u2510", width, attr)
    for y in range(top + 1, top + height - 1):
        _put(screen, y, 0, "\u2502", 1, attr)
        _put(screen, y, width - 1, "\u2502", 1, attr)
    _put(screen, top + height - 1, 0, f"\u2514{horizontal}\u2518", width, attr)


def _put(screen, y: int, x: int, text: str, limit: int, attr: int) -> None:
    if limit <= 0 or not text:
        return
    try:
        screen.addnstr(y, x, text, limit, attr)
    except curses.error:
        # Writing into the bottom-right cell moves the cursor off-screen.
        pass


def _version_label() -> str:
    try:
        number = version("freespace")
    except PackageNotFoundError:
        number = "0.0.2"
    return f"v{number} "