"""Best-effort styling hints from an uploaded .pptx template.

A .pptx file is a zip archive of XML parts. Rather than parsing the
DrawingML schema, we pattern-match a handful of attributes out of the theme
part and the first slide. Each lookup is independent: whatever cannot be
found keeps its default.
"""
import io
import logging
import re
import zipfile
from typing import Optional

from errors import ThemeExtractionError
from models import ThemeDescriptor

logger = logging.getLogger(__name__)

THEME_ENTRY = "ppt/theme/theme1.xml"
FIRST_SLIDE_ENTRY = "ppt/slides/slide1.xml"

# First sRGB colour inside a colour-scheme slot; attribute order is not fixed.
_SRGB = r'<a:srgbClr\b[^>]*?\bval=["\']([0-9A-Fa-f]{6})["\']'
COLOR_PATTERNS = {
    "accent1": re.compile(r"<a:accent1\b[^>]*>[\s\S]*?" + _SRGB + r"[\s\S]*?</a:accent1>", re.IGNORECASE),
    "dk1": re.compile(r"<a:dk1\b[^>]*>[\s\S]*?" + _SRGB + r"[\s\S]*?</a:dk1>", re.IGNORECASE),
}
LATIN_FONT_PATTERN = re.compile(r'<a:latin\b[^>]*?\btypeface=["\']([^"\']*)["\']')


class ThemeBuilder:
    """Collects theme fields one at a time; `build()` freezes the result."""

    def __init__(self):
        self._fields = {}

    def set(self, **fields) -> "ThemeBuilder":
        self._fields.update(fields)
        return self

    def build(self) -> ThemeDescriptor:
        return ThemeDescriptor(**self._fields)


def _read_text(archive: zipfile.ZipFile, name: str) -> Optional[str]:
    if name not in archive.namelist():
        return None
    return archive.read(name).decode("utf-8", errors="replace")


def find_theme_colors(theme_xml: str) -> dict:
    """Returns {'titleColor', 'contentColor'} for whichever slots matched."""
    colors = {}
    accent1 = COLOR_PATTERNS["accent1"].search(theme_xml)
    dk1 = COLOR_PATTERNS["dk1"].search(theme_xml)
    if accent1:
        colors["titleColor"] = accent1.group(1)
    if dk1:
        colors["contentColor"] = dk1.group(1)
    return colors


def find_latin_font(slide_xml: str) -> Optional[str]:
    for match in LATIN_FONT_PATTERN.finditer(slide_xml):
        typeface = match.group(1).strip()
        # '+mj-lt' / '+mn-lt' point back into the template's own theme
        if typeface and not typeface.startswith("+"):
            return typeface
    return None


def extract_template_theme(template_bytes: bytes) -> ThemeDescriptor:
    """
    Reads colour and font hints out of a .pptx template.

    Raises ThemeExtractionError only when the bytes cannot be opened as a
    zip archive.
    A readable archive always yields a ThemeDescriptor, with defaults for
    anything that could not be found.
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(template_bytes))
    except Exception as e:
        raise ThemeExtractionError(f"Template is not a readable archive: {e}") from e

    builder = ThemeBuilder()
    with archive:
        try:
            theme_xml = _read_text(archive, THEME_ENTRY)
            if theme_xml is not None:
                colors = find_theme_colors(theme_xml)
                builder.set(**colors)
                logger.info(f"Extracted colors - Title: {colors.get('titleColor', 'default')}, "
                            f"Content: {colors.get('contentColor', 'default')}")
        except Exception as e:
            logger.warning(f"Could not extract theme colors, using defaults: {e}", exc_info=True)

        try:
            slide_xml = _read_text(archive, FIRST_SLIDE_ENTRY)
            if slide_xml is not None:
                font = find_latin_font(slide_xml)
                if font:
                    builder.set(titleFont=font, contentFont=font)
                    logger.info(f"Extracted font: {font}")
        except Exception as e:
            logger.warning(f"Could not extract fonts, using defaults: {e}", exc_info=True)

    return builder.build()


def load_template_theme(template_bytes: Optional[bytes]) -> Optional[ThemeDescriptor]:
    """Caller-side wrapper: no template, or an unreadable one, means no theme."""
    if not template_bytes:
        return None
    try:
        return extract_template_theme(template_bytes)
    except ThemeExtractionError as e:
        logger.error(f"Error extracting template theme: {e}")
        return None
    except Exception as e:
        logger.error(f"Unexpected error extracting template theme: {e}", exc_info=True)
        return None
