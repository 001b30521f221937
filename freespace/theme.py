"""Colour theme and text styles used by the terminal views."""

from __future__ import annotations

from dataclasses import dataclass, replace

# A colour is either an index into the 256-colour palette or RESET,
# meaning the terminal's own default colour.
RESET = "reset"

Color = int | str


@dataclass(frozen=True)
class Style:
    """Foreground, background and boldness of a piece of text.

    A colour of None leaves whatever colour is already in effect.
    """

    fg: Color | None = None
    bg: Color | None = None
    bold: bool = False

    def with_bold(self) -> Style:
        """Return a copy of this style with bold turned on."""
        return replace(self, bold=True)


@dataclass(frozen=True)
class Theme:
    """Central colour definitions shared by every view.

    Defaults use 256-colour palette values for broad terminal support.
    """

    background: Color = RESET
    foreground: Color = 252  # light gray
    border: Color = 240  # mid gray
    selected_bg: Color = 236  # dark gray highlight
    selected_fg: Color = 255  # bright white
    header_fg: Color = 75  # steel blue
    header_bg: Color = RESET
    size_fg: Color = 222  # light gold
    error_fg: Color = 196  # red
    warning_fg: Color = 214  # orange
    status_loading: Color = 75  # blue, work in progress
    description: Color = 244  # lighter gray

    def style_normal(self) -> Style:
        """Style for normal text."""
        return Style(fg=self.foreground, bg=self.background)

    def style_selected(self) -> Style:
        """Style for the highlighted row."""
        return Style(fg=self.selected_fg, bg=self.selected_bg, bold=True)

    def style_header(self) -> Style:
        """Style for titles and headers."""
        return Style(fg=self.header_fg, bg=self.header_bg, bold=True)

    def style_size(self) -> Style:
        """Style for size figures."""
        return Style(fg=self.size_fg)

    def style_border(self) -> Style:
        """Style for border lines."""
        return Style(fg=self.border)

    def style_error(self) -> Style:
        """Style for errors."""
        return Style(fg=self.error_fg, bold=True)

    def style_warning(self) -> Style:
        """Style for warnings."""
        return Style(fg=self.warning_fg)

    def style_status_loading(self) -> Style:
        """Style for in-progress indicators."""
        return Style(fg=self.status_loading)

    def style_description(self) -> Style:
        """Style for module and target descriptions."""
        return Style(fg=self.description)