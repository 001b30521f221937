import curses

import pytest

from freespace.install_select import (
    InstallSelectState,
    KeyResult,
    SelectionCancelled,
    _translate_key,
)
from freespace.manifest import Module
from freespace.widgets import Key, KeyModifiers

NONE = KeyModifiers.NONE
CTRL = KeyModifiers.CONTROL


def make_state(n):
    return InstallSelectState(
        candidates=[(f"mod-{i}", f"dir-{i}") for i in range(n)],
        selected=[True] * n,
    )


class FakeScreen:
    def __init__(self, height, width):
        self.height = height
        self.width = width
        self.erase()

    def getmaxyx(self):
        return self.height, self.width

    def erase(self):
        self.rows = [[" "] * self.width for _ in range(self.height)]

    def addnstr(self, y, x, text, n, attr=0):
        for offset, ch in enumerate(text[:n]):
            if 0 <= y < self.height and 0 <= x + offset < self.width:
                self.rows[y][x + offset] = ch

    def line(self, y):
        return "".join(self.rows[y])

    def text(self):
        return "\n".join(self.line(y) for y in range(self.height))


def test_navigate_down_wraps():
    s = make_state(3)
    s.handle_key("j", NONE)
    assert s.cursor == 1
    s.handle_key("j", NONE)
    assert s.cursor == 2
    s.handle_key("j", NONE)
    assert s.cursor == 0


def test_navigate_up_wraps():
    s = make_state(3)
    s.handle_key("k", NONE)
    assert s.cursor == 2
    s.handle_key("k", NONE)
    assert s.cursor == 1


def test_arrow_keys_move():
    s = make_state(3)
    s.handle_key(Key.DOWN, NONE)
    assert s.cursor == 1
    s.handle_key(Key.UP, NONE)
    assert s.cursor == 0


def test_toggle_selection():
    s = make_state(3)
    assert s.selected[0]
    s.handle_key(" ", NONE)
    assert not s.selected[0]
    s.handle_key(" ", NONE)
    assert s.selected[0]


def test_select_all():
    s = make_state(3)
    s.selected = [False] * 3
    assert s.handle_key("a", NONE) is KeyResult.CONTINUE
    assert all(s.selected)


def test_select_none():
    s = make_state(3)
    assert s.handle_key("n", NONE) is KeyResult.CONTINUE
    assert s.selected_indices() == []


def test_confirm_returns_selected():
    s = make_state(3)
    s.selected = [True, False, True]
    assert s.handle_key(Key.ENTER, NONE) is KeyResult.CONFIRM
    assert s.selected_indices() == [0, 2]


def test_cancel_on_esc():
    assert make_state(3).handle_key(Key.ESC, NONE) is KeyResult.CANCEL


def test_cancel_on_q():
    assert make_state(3).handle_key("q", NONE) is KeyResult.CANCEL


def test_cancel_on_ctrl_c():
    assert make_state(3).handle_key("c", CTRL) is KeyResult.CANCEL


def test_ctrl_n_moves_down():
    s = make_state(3)
    s.handle_key("n", CTRL)
    assert s.cursor == 1
    assert all(s.selected)


def test_ctrl_p_moves_up():
    s = make_state(3)
    s.handle_key("j", NONE)
    s.handle_key("p", CTRL)
    assert s.cursor == 0


def test_empty_candidates_no_error():
    s = make_state(0)
    s.handle_key("j", NONE)
    s.handle_key("k", NONE)
    s.handle_key(" ", NONE)
    assert s.selected_indices() == []
    assert s.cursor == 0


def test_status_text():
    s = make_state(3)
    s.handle_key(" ", NONE)
    assert s.status_text() == "2/3 selected"


def test_mismatched_selection_rejected():
    with pytest.raises(ValueError):
        InstallSelectState(candidates=[("a", "b")], selected=[True, False])


def test_from_modules_selects_everything():
    module = Module(
        id="alpha-mod",
        name="alpha-mod",
        version="1.0.0",
        description="Test",
        author="tester",
        platforms=["linux"],
    )
    state = InstallSelectState.from_modules([("alpha", module), ("beta", module)])
    assert state.candidates == [("alpha-mod", "alpha"), ("alpha-mod", "beta")]
    assert state.selected_indices() == [0, 1]


def test_selection_cancelled_message():
    assert str(SelectionCancelled()) == "user cancelled installation"


def test_render_draws_title_rows_and_status():
    s = make_state(3)
    screen = FakeScreen(24, 80)
    s.render(screen)
    assert "Select modules to install" in screen.line(1)
    assert "mod-0" in screen.text()
    assert "dir-2" in screen.text()
    assert "3/3 selected" in screen.line(23)
    assert "\u25b6" in screen.line(4)
    assert "[x]" in screen.line(4)


def test_render_reflects_toggle():
    s = make_state(3)
    s.handle_key(" ", NONE)
    screen = FakeScreen(24, 80)
    s.render(screen)
    assert "[ ]" in screen.line(4)
    assert "2/3 selected" in screen.line(23)


def test_render_scrolls_to_cursor():
    s = make_state(30)
    s.cursor = 29
    screen = FakeScreen(12, 80)
    s.render(screen)
    assert "mod-29" in screen.text()
    assert "mod-0" not in screen.text()


def test_render_empty():
    s = make_state(0)
    screen = FakeScreen(24, 80)
    s.render(screen)
    assert "0/0 selected" in screen.line(23)


def test_render_tiny_screen_shows_status():
    s = make_state(2)
    screen = FakeScreen(2, 80)
    s.render(screen)
    assert "2/2 selected" in screen.line(1)


@pytest.mark.parametrize(
    ("pressed", "expected"),
    [
        ("\n", (Key.ENTER, NONE)),
        ("\x1b", (Key.ESC, NONE)),
        ("\x03", ("c", CTRL)),
        ("\x0e", ("n", CTRL)),
        ("j", ("j", NONE)),
        (curses.KEY_UP, (Key.UP, NONE)),
        (curses.KEY_DOWN, (Key.DOWN, NONE)),
    ],
)
def test_translate_key(pressed, expected):
    assert _translate_key(pressed) == expected


def test_translate_key_ignores_unknown_int():
    assert _translate_key(curses.KEY_RESIZE) is None