"""Font catalog and local font lookup.

Nothing here downloads fonts. Files are looked up in a fonts directory the
caller supplies (``fonts_dir`` in the config), and system availability is
checked with ``fc-list``.
"""

from __future__ import annotations

import functools
import logging
import subprocess
from pathlib import Path
from urllib.parse import quote

from video_editor.text.models import FontMetadata

logger = logging.getLogger(__name__)

GOOGLE_FONTS_CSS_URL = "https://fonts.googleapis.com/css2"

FONT_WEIGHT_VALUES: dict[str, int] = {
    "thin": 100,
    "extralight": 200,
    "light": 300,
    "regular": 400,
    "medium": 500,
    "semibold": 600,
    "bold": 700,
    "extrabold": 800,
    "black": 900,
}

_ALL_WEIGHTS = tuple(FONT_WEIGHT_VALUES)
_FALLBACKS = ("Arial", "Helvetica")


def _google(family: str) -> str:
    return f"https://fonts.google.com/specimen/{family.replace(' ', '+')}"


def _font(family, category, weights, recommended_for, google=True) -> FontMetadata:
    return FontMetadata(
        family=family,
        display_name=family,
        category=category,
        weights=tuple(weights),
        google_fonts_url=_google(family) if google else None,
        recommended_for=tuple(recommended_for),
    )


FONTS: dict[str, FontMetadata] = {
    f.family: f
    for f in (
        # Sans-serif
        _font("Montserrat", "sans-serif", _ALL_WEIGHTS, ("titles", "subtitles", "captions")),
        _font("Roboto", "sans-serif", ("thin", "light", "regular", "medium", "bold", "black"),
              ("subtitles", "captions")),
        _font("Poppins", "sans-serif", _ALL_WEIGHTS, ("titles", "subtitles", "captions", "hooks")),
        _font("Inter", "sans-serif", _ALL_WEIGHTS, ("subtitles", "captions")),
        _font("Open Sans", "sans-serif",
              ("light", "regular", "medium", "semibold", "bold", "extrabold"),
              ("subtitles", "captions")),
        _font("Oswald", "sans-serif",
              ("extralight", "light", "regular", "medium", "semibold", "bold"),
              ("titles", "hooks")),
        # Display
        _font("Bebas Neue", "display", ("regular",), ("titles", "hooks")),
        _font("Anton", "display", ("regular",), ("titles", "hooks")),
        _font("Impact", "display", ("regular",), ("titles", "hooks"), google=False),
        _font("Archivo Black", "display", ("regular",), ("titles", "hooks")),
        _font("Black Ops One", "display", ("regular",), ("titles", "hooks")),
        _font("Russo One", "display", ("regular",), ("titles", "hooks")),
        _font("Bangers", "display", ("regular",), ("titles", "hooks")),
        _font("Fredoka One", "display", ("regular",), ("titles", "hooks")),
        _font("Luckiest Guy", "display", ("regular",), ("titles", "hooks")),
        # Handwriting
        _font("Permanent Marker", "handwriting", ("regular",), ("titles", "hooks")),
        _font("Pacifico", "handwriting", ("regular",), ("titles",)),
        _font("Lobster", "handwriting", ("regular",), ("titles",)),
        # System
        _font("Arial", "sans-serif", ("regular", "bold"), ("subtitles", "captions"), google=False),
        _font("Arial Black", "sans-serif", ("regular",), ("titles", "hooks"), google=False),
        _font("Helvetica", "sans-serif", ("light", "regular", "bold"),
              ("subtitles", "captions"), google=False),
        _font("Verdana", "sans-serif", ("regular", "bold"), ("subtitles", "captions"), google=False),
    )
}


def get_font_weight_value(weight: str) -> int:
    return FONT_WEIGHT_VALUES.get(weight, FONT_WEIGHT_VALUES["regular"])


def get_fonts_by_category(category: str) -> list[FontMetadata]:
    return [f for f in FONTS.values() if f.category == category]


def get_fonts_for_use(use: str) -> list[FontMetadata]:
    """Fonts recommended for ``titles``, ``subtitles``, ``captions`` or ``hooks``."""
    return [f for f in FONTS.values() if use in f.recommended_for]


@functools.lru_cache(maxsize=None)
def is_font_available(family: str) -> bool:
    """True if fontconfig knows a family matching ``family`` (case-insensitive)."""
    try:
        result = subprocess.run(
            ["fc-list", ":", "family"],
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("fc-list unavailable: %s", e)
        return False
    if result.returncode != 0:
        return False
    needle = family.lower()
    return any(needle in line.lower() for line in result.stdout.splitlines())


def get_font_with_fallback(family: str) -> str:
    """Return ``family`` if installed, else the first installed fallback."""
    if is_font_available(family):
        return family
    for fallback in _FALLBACKS:
        if is_font_available(fallback):
            logger.warning("Font %r not available, using %r", family, fallback)
            return fallback
    return "sans-serif"


def get_font_path(family: str, weight: str = "regular", fonts_dir: str | Path | None = None) -> Path | None:
    """Find a ``.ttf`` for ``family``/``weight`` in ``fonts_dir``.

    Tried in order: ``OpenSans-bold.ttf``, ``OpenSans-700.ttf``,
    ``OpenSans.ttf``, ``Open-Sans-bold.ttf``, ``Open-Sans.ttf``.
    """
    if fonts_dir is None:
        return None
    base = Path(fonts_dir)
    joined = "".join(family.split())
    dashed = "-".join(family.split())
    candidates = (
        f"{joined}-{weight}.ttf",
        f"{joined}-{get_font_weight_value(weight)}.ttf",
        f"{joined}.ttf",
        f"{dashed}-{weight}.ttf",
        f"{dashed}.ttf",
    )
    for name in candidates:
        path = base / name
        if path.exists():
            return path
    return None


def get_google_fonts_css_url(family: str, weights: tuple[str, ...] = ("regular", "bold")) -> str:
    values = ";".join(str(get_font_weight_value(w)) for w in weights)
    return f"{GOOGLE_FONTS_CSS_URL}?family={quote(family)}:wght@{values}&display=swap"


def get_missing_fonts() -> list[FontMetadata]:
    """Catalog fonts that could be fetched from Google Fonts but are not installed."""
    return [f for f in FONTS.values() if f.google_fonts_url and not is_font_available(f.family)]
