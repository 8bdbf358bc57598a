import io
import logging
from typing import List, NamedTuple, Optional, Tuple

from lxml import etree
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.util import Emu, Inches, Pt

from errors import RenderError
from models import SlideDocument, ThemeDescriptor

logger = logging.getLogger(__name__)


# --- 1. Design Constants ---
AUTHOR = "AI Presentation Generator"
COMPANY = "AI Generated"
BLANK_LAYOUT_INDEX = 6

# Default mode (no template)
DEFAULT_FONT = "Arial"
DEFAULT_TITLE_BOX = (Inches(0.5), Inches(0.5), Inches(9), Inches(1))
DEFAULT_CONTENT_BOX = (Inches(0.5), Inches(2), Inches(9), Inches(4))
DEFAULT_TITLE_FONT_SIZE = Pt(28)
DEFAULT_CONTENT_FONT_SIZE = Pt(18)
DEFAULT_TITLE_COLOR = "1F497D"
DEFAULT_CONTENT_COLOR = "444444"

# Themed mode (template supplied)
THEMED_TITLE_BOX = (Inches(0.5), Inches(0.7), Inches(9), Inches(1.2))
THEMED_CONTENT_BOX = (Inches(0.8), Inches(2.2), Inches(8.5), Inches(4.5))
SLIDE_NUMBER_BOX = (Inches(9.2), Inches(6.8), Inches(0.6), Inches(0.3))
SLIDE_NUMBER_FONT_SIZE = Pt(12)
SLIDE_NUMBER_COLOR = "666666"

# Bullet geometry, in EMU
BULLET_MARGIN = 342900
BULLET_HANGING_INDENT = -342900
BULLET_CHAR = "•"

Box = Tuple[Emu, Emu, Emu, Emu]


class TextStyle(NamedTuple):
    font: str
    size: Pt
    color: str
    bold: bool = False
    align: Optional[PP_ALIGN] = None


class SlideStyles(NamedTuple):
    title_box: Box
    title: TextStyle
    content_box: Box
    content: TextStyle
    background: Optional[str] = None
    slide_numbers: bool = False


def default_styles() -> SlideStyles:
    return SlideStyles(
        title_box=DEFAULT_TITLE_BOX,
        title=TextStyle(DEFAULT_FONT, DEFAULT_TITLE_FONT_SIZE, DEFAULT_TITLE_COLOR, bold=True, align=PP_ALIGN.CENTER),
        content_box=DEFAULT_CONTENT_BOX,
        content=TextStyle(DEFAULT_FONT, DEFAULT_CONTENT_FONT_SIZE, DEFAULT_CONTENT_COLOR),
    )


def themed_styles(theme: ThemeDescriptor) -> SlideStyles:
    """Layout skeleton of the themed mode, dressed in the template's fonts and colours."""
    return SlideStyles(
        title_box=THEMED_TITLE_BOX,
        title=TextStyle(theme.titleFont, Pt(theme.titleFontSize), theme.titleColor, bold=True, align=PP_ALIGN.CENTER),
        content_box=THEMED_CONTENT_BOX,
        content=TextStyle(theme.contentFont, Pt(theme.contentFontSize), theme.contentColor),
        background=theme.background.color,
        slide_numbers=True,
    )


# --- 2. Helper Functions ---

def apply_text_style(run, style: TextStyle):
    font = run.font
    font.name = style.font
    font.size = style.size
    font.bold = style.bold
    font.color.rgb = RGBColor.from_string(style.color)


def set_bullet(paragraph):
    """Turns a paragraph into a native bulleted paragraph (a:buChar)."""
    pPr = paragraph._p.get_or_add_pPr()
    pPr.set("marL", str(BULLET_MARGIN))
    pPr.set("indent", str(BULLET_HANGING_INDENT))
    bu_font = etree.SubElement(pPr, qn("a:buFont"))
    bu_font.set("typeface", DEFAULT_FONT)
    bu_char = etree.SubElement(pPr, qn("a:buChar"))
    bu_char.set("char", BULLET_CHAR)


def add_text_box(slide, box: Box, text: str, style: TextStyle, anchor=MSO_ANCHOR.TOP):
    """Adds a text box with one paragraph per line of `text`."""
    shape = slide.shapes.add_textbox(*box)
    text_frame = shape.text_frame
    text_frame.word_wrap = True
    text_frame.vertical_anchor = anchor
    for i, line in enumerate(text.splitlines() or [""]):
        p = text_frame.paragraphs[0] if i == 0 else text_frame.add_paragraph()
        if style.align is not None:
            p.alignment = style.align
        run = p.add_run()
        run.text = line
        apply_text_style(run, style)
    return shape


def add_bullet_box(slide, box: Box, items: List[str], style: TextStyle):
    """Adds a text box holding one bulleted paragraph per item."""
    shape = slide.shapes.add_textbox(*box)
    text_frame = shape.text_frame
    text_frame.word_wrap = True
    text_frame.vertical_anchor = MSO_ANCHOR.TOP

    for i, item in enumerate(items):
        p = text_frame.paragraphs[0] if i == 0 else text_frame.add_paragraph()
        # Bullet markup goes in before any run so pPr children stay in schema order
        set_bullet(p)
        run = p.add_run()
        run.text = item
        apply_text_style(run, style)
    return shape


def paint_background(slide, color: str):
    fill = slide.background.fill
    fill.solid()
    fill.fore_color.rgb = RGBColor.from_string(color)


# --- 3. Slide Drawing ---

def draw_slide(slide, data, index: int, styles: SlideStyles):
    """Draws one outline slide: background, title, content, slide number."""
    if styles.background:
        paint_background(slide, styles.background)

    title = data.title or f"Slide {index + 1}"
    add_text_box(slide, styles.title_box, title, styles.title)

    content = data.content
    if isinstance(content, list):
        add_bullet_box(slide, styles.content_box, content, styles.content)
    elif content:
        add_text_box(slide, styles.content_box, content, styles.content)

    if styles.slide_numbers:
        number_style = TextStyle(DEFAULT_FONT, SLIDE_NUMBER_FONT_SIZE, SLIDE_NUMBER_COLOR, align=PP_ALIGN.CENTER)
        add_text_box(slide, SLIDE_NUMBER_BOX, str(index + 1), number_style)

    logger.debug(f"  - Drawing slide {index + 1}: {title}")


# --- 4. Main Execution Logic ---

def create_presentation(document: SlideDocument, styles: SlideStyles):
    """Builds a new Presentation from the outline. Nothing is copied from any template."""
    prs = Presentation()

    # Core properties are capped at 255 characters
    props = prs.core_properties
    props.author = AUTHOR
    props.category = COMPANY
    props.revision = 1
    props.title = document.presentationTitle[:255]
    props.subject = document.presentationTitle[:255]

    blank_layout = prs.slide_layouts[BLANK_LAYOUT_INDEX]
    for i, slide_data in enumerate(document.slides):
        slide = prs.slides.add_slide(blank_layout)
        draw_slide(slide, slide_data, i, styles)

    return prs


def save_presentation(prs) -> bytes:
    buffer = io.BytesIO()
    prs.save(buffer)
    return buffer.getvalue()


def render_presentation(document: SlideDocument, theme: Optional[ThemeDescriptor] = None) -> bytes:
    """
    Renders the outline to .pptx bytes.

    With a theme the slides take the template's fonts, colours and
    background; if that fails for any reason the deck is rendered again with
    the default styling. Failure in default styling raises RenderError.
    """
    if theme is not None:
        logger.info("Using template styling for PPTX generation")
        try:
            prs = create_presentation(document, themed_styles(theme))
            data = save_presentation(prs)
            logger.info(f"Created {len(document.slides)} new slides using template styling")
            return data
        except Exception as e:
            logger.error(f"Error creating slides with template style, falling back to defaults: {e}", exc_info=True)

    logger.info("Creating new presentation without template")
    try:
        return save_presentation(create_presentation(document, default_styles()))
    except Exception as e:
        logger.error(f"Failed to render presentation: {e}", exc_info=True)
        raise RenderError("Failed to render presentation", details=str(e)) from e
