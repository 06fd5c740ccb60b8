# src/myday/lists/themes.py

from __future__ import annotations

from .list_models import ListTheme, ThemeType

DEFAULT_TEXT_COLOR = "#AC395D"
IMAGE_TEXT_COLOR = "#FFFFFF"
DEFAULT_USER_LIST_COLOR = "#5F73C1"

# (background, text) pairs offered by the theme picker.
THEME_COLORS: tuple[tuple[str, str], ...] = (
    ("#CA5474", "#FFFFFF"),
    ("#C5524D", "#FFFFFF"),
    ("#F2E7F9", "#7D5294"),
    ("#D5F1E5", "#1E704D"),
    ("#D4F1EF", "#166F6B"),
    ("#FFE4E9", "#AC395D"),
    ("#707E89", "#FFFFFF"),
    ("#E7ECF0", "#586570"),
    ("#FCE4EC", "#AC395D"),
    ("#5F73C1", "#FFFFFF"),
)

# Colours used by older builds that are no longer in the picker.
_LEGACY_TEXT_COLORS = {
    "#fce4ec": "#AC395D",
    "#f5f5f5": "#AC395D",
}


def text_color_for(theme: ListTheme | None) -> str:
    if theme is None:
        return DEFAULT_TEXT_COLOR
    if theme.type == ThemeType.IMAGE:
        return IMAGE_TEXT_COLOR

    wanted = theme.value.lower()
    for background, text in THEME_COLORS:
        if background.lower() == wanted:
            return text

    return _LEGACY_TEXT_COLORS.get(wanted, DEFAULT_TEXT_COLOR)
