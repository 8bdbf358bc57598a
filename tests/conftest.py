# tests/conftest.py
import io
import sys
import pathlib
import struct
import zipfile

import pytest

# Add the repository root to sys.path so the service modules import under pytest
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pptx import Presentation  # noqa: E402

from models import SlideDocument  # noqa: E402

DEMO_RESPONSE = '{"slides":[{"title":"Sky","content":["Blue"]}],"presentationTitle":"Demo"}'


def make_archive(entries, compression=zipfile.ZIP_DEFLATED):
    """Builds an in-memory zip with the given {name: text} entries."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression) as zf:
        for name, text in entries.items():
            zf.writestr(name, text)
    return buffer.getvalue()


def with_bad_directory_offset(data):
    """Points the end-of-central-directory record at an impossible offset.

    The archive still opens (zipfile recovers the directory from its size)
    but every entry header lands before the start of the file.
    """
    eocd = data.rfind(b"PK\x05\x06")
    return data[:eocd + 16] + struct.pack("<I", 0xFFFFFFF0) + data[eocd + 20:]


def theme_xml(accent1='<a:srgbClr val="C0504D"/>', dk1='<a:srgbClr val="1A1A1A"/>'):
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        '<a:theme xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" name="Test">'
        '<a:themeElements><a:clrScheme name="Test">'
        f'<a:dk1>{dk1}</a:dk1>'
        '<a:lt1><a:sysClr val="window" lastClr="FFFFFF"/></a:lt1>'
        '<a:dk2><a:srgbClr val="1F497D"/></a:dk2>'
        f'<a:accent1>{accent1}</a:accent1>'
        '<a:accent2><a:srgbClr val="9BBB59"/></a:accent2>'
        '</a:clrScheme></a:themeElements></a:theme>'
    )


def slide_xml(typeface="Georgia"):
    return (
        '<p:sld xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
        'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main">'
        '<p:cSld><p:spTree><p:sp><p:txBody><a:p><a:r>'
        f'<a:rPr lang="en-US"><a:latin typeface="{typeface}"/></a:rPr><a:t>Hi</a:t>'
        '</a:r></a:p></p:txBody></p:sp></p:spTree></p:cSld></p:sld>'
    )


@pytest.fixture
def demo_document():
    return SlideDocument.model_validate({
        "presentationTitle": "Demo",
        "slides": [
            {"title": "Sky", "content": ["Blue", "Wide"], "type": "content"},
            {"title": "Water", "content": "Water is wet.", "type": "content"},
            {"title": "Closing"},
        ],
    })


@pytest.fixture
def template_bytes():
    """A real .pptx produced by python-pptx, usable as an upload."""
    buffer = io.BytesIO()
    Presentation().save(buffer)
    return buffer.getvalue()
