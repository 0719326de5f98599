"""Color theme for hollow CLI output.

The bundled palette lives in ``hollow/data/theme.toml``. Any subset of
it can be overridden in ``~/.config/hollow/theme.toml``; invalid
overrides fall back to the defaults with a warning.
"""

import logging
import re
import tomllib
from importlib import resources
from pathlib import Path
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, ValidationError
from rich.theme import Theme

from hollow.core.paths import get_config_dir

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def _check_hex(value: str) -> str:
    color = value.strip()
    if not _HEX_COLOR.match(color):
        msg = f"invalid hex color {value!r}, expected #RGB or #RRGGBB"
        raise ValueError(msg)
    return color


HexColor = Annotated[str, AfterValidator(_check_hex)]


class ThemeColors(BaseModel):
    """Palette used by the CLI.

    Attributes:
        text: Plain values in tables.
        muted: Labels and secondary detail.
        header: Table headers.
        border: Table borders.
        success: Completed scans and accessible roots.
        warning: Recoverable problems.
        error: Failures.
        info: Progress messages.
        folder_empty: Empty-folder counts.
        folder_path: Folder names and paths.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: HexColor = "#ffffff"
    muted: HexColor = "#b2bec3"
    header: HexColor = "#69B9A1"
    border: HexColor = "#29526d"
    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"
    info: HexColor = "#0ec1c8"
    folder_empty: HexColor = "#c1ff62"
    folder_path: HexColor = "#0e8ac8"


# Styles that add emphasis on top of a palette color
_BOLD_STYLES = frozenset({"error", "folder_empty"})


def get_user_theme_path() -> Path:
    """Path of the optional user override, ~/.config/hollow/theme.toml."""
    return get_config_dir() / "theme.toml"


def _read_colors(path: Path) -> dict[str, str]:
    """Read the ``[colors]`` table of a theme file.

    Missing or unreadable files yield an empty table; non-string values
    are ignored.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}

    colors = data.get("colors", {})
    if not isinstance(colors, dict):
        logger.warning("Ignoring theme file %s: [colors] is not a table", path)
        return {}
    return {key: value for key, value in colors.items() if isinstance(value, str)}


def load_theme(user_path: Path | None = None) -> ThemeColors:
    """Load the bundled palette merged with the user's overrides.

    Args:
        user_path: Override file to apply. Defaults to get_user_theme_path().

    Returns:
        Validated ThemeColors; the built-in defaults if validation fails.
    """
    bundled = resources.files("hollow.data").joinpath("theme.toml")
    with resources.as_file(bundled) as bundled_path:
        colors = _read_colors(bundled_path)
    colors.update(_read_colors(user_path or get_user_theme_path()))

    try:
        return ThemeColors.model_validate(colors)
    except ValidationError as e:
        logger.warning("Invalid theme, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme for a palette.

    Every palette color becomes a style of the same name, plus
    ``bold_header`` for table headers and ``dim`` as an alias of muted.
    """
    colors = colors or load_theme()
    styles = {
        name: f"bold {value}" if name in _BOLD_STYLES else value
        for name, value in colors.model_dump().items()
    }
    styles["bold_header"] = f"bold {colors.header}"
    styles["dim"] = colors.muted
    return Theme(styles)


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Get the Rich theme, loading and caching it on first use."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme


def reload_theme() -> Theme:
    """Reload the theme from disk, replacing the cached one."""
    global _cached_theme
    _cached_theme = get_rich_theme()
    return _cached_theme
