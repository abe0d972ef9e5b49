"""
Low-level PDF utilities for AcroForm templates.

`PdfForm` wraps a pypdf writer cloned from the template and exposes the flat
field list and the two write operations the binding engine needs. After
filling, text widgets get a fixed font size through PyMuPDF so long values do
not render oversized.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol

import fitz  # PyMuPDF
from pypdf import PdfReader, PdfWriter
from pypdf.generic import BooleanObject, NameObject, TextStringObject

from .exceptions import FormReadError, FormWriteError

logger = logging.getLogger(__name__)

# Field flags (PDF 32000-1, 12.7.4)
FLAG_MULTILINE = 1 << 12
FLAG_RADIO = 1 << 15
FLAG_PUSHBUTTON = 1 << 16

DEFAULT_FONT_SIZE = 11


@dataclass(frozen=True)
class FormField:
    """One terminal field of the AcroForm tree."""

    name: str
    field_type: str  # "/Tx", "/Btn", "/Ch", "/Sig" or "" when undeclared
    flags: int = 0
    value: Optional[str] = None

    @property
    def is_multiline(self) -> bool:
        return bool(self.flags & FLAG_MULTILINE)

    @property
    def is_radio(self) -> bool:
        return self.field_type == "/Btn" and bool(self.flags & FLAG_RADIO)

    @property
    def is_pushbutton(self) -> bool:
        return self.field_type == "/Btn" and bool(self.flags & FLAG_PUSHBUTTON)


class FillableForm(Protocol):
    """What the binding engine needs from a form."""

    def iter_fields(self) -> Iterator[FormField]:
        ...

    def set_text(self, name: str, value: str) -> None:
        ...

    def check(self, name: str) -> None:
        ...

    def to_bytes(self) -> bytes:
        ...


def _on_state(widget) -> str:
    """Find the 'on' appearance state of a checkbox widget."""
    appearance = widget.get("/AP")
    if appearance is not None:
        normal = appearance.get_object().get("/N")
        if normal is not None:
            for key in normal.get_object().keys():
                if str(key) != "/Off":
                    return str(key)
    return "/Yes"


class PdfForm:
    """In-memory AcroForm backed by a pypdf writer."""

    def __init__(self, writer: PdfWriter, source: str = "<memory>", font_size: int = DEFAULT_FONT_SIZE):
        self.writer = writer
        self.source = source
        self.font_size = font_size
        self._nodes: Dict[str, object] = {}
        self._widgets: Dict[str, List[object]] = {}
        self._fields: Optional[List[FormField]] = None

    @classmethod
    def open(cls, path: Path, font_size: int = DEFAULT_FONT_SIZE) -> "PdfForm":
        path = Path(path)
        if not path.is_file():
            raise FormReadError(f"PDF template not found: {path}")
        try:
            reader = PdfReader(str(path), strict=False)
            writer = PdfWriter(clone_from=reader)
        except Exception as exc:
            raise FormReadError(f"Cannot read PDF template {path.name}: {exc}") from exc
        return cls(writer, source=path.name, font_size=font_size)

    @property
    def acro_form(self):
        root = self.writer._root_object
        if "/AcroForm" not in root:
            return None
        return root["/AcroForm"].get_object()

    def iter_fields(self) -> Iterator[FormField]:
        if self._fields is None:
            self._fields = self._collect()
        return iter(self._fields)

    def _collect(self) -> List[FormField]:
        acro_form = self.acro_form
        if acro_form is None:
            raise FormReadError(f"{self.source} has no form field catalogue (/AcroForm missing)")
        fields: List[FormField] = []
        try:
            for ref in acro_form.get("/Fields", []):
                self._walk(ref.get_object(), "", "", 0, fields)
        except FormReadError:
            raise
        except Exception as exc:
            raise FormReadError(f"Cannot parse form fields of {self.source}: {exc}") from exc
        return fields

    def _walk(self, node, parent_name: str, field_type: str, flags: int, out: List[FormField]) -> None:
        partial = node.get("/T")
        name = parent_name
        if partial is not None:
            name = f"{parent_name}.{partial}" if parent_name else str(partial)
        field_type = str(node.get("/FT", field_type) or "")
        flags = int(node.get("/Ff", flags) or 0)

        kids = [kid.get_object() for kid in node.get("/Kids", [])]
        child_fields = [kid for kid in kids if "/T" in kid]
        if child_fields:
            for kid in child_fields:
                self._walk(kid, name, field_type, flags, out)
            return
        if not name:
            return

        value = node.get("/V")
        out.append(FormField(name=name, field_type=field_type, flags=flags, value=None if value is None else str(value)))
        self._nodes[name] = node
        self._widgets[name] = kids or [node]

    def _node(self, name: str):
        if self._fields is None:
            self._fields = self._collect()
        try:
            return self._nodes[name]
        except KeyError:
            raise KeyError(f"No field named {name!r} in {self.source}") from None

    def set_text(self, name: str, value: str) -> None:
        node = self._node(name)
        node[NameObject("/V")] = TextStringObject(value)
        for widget in self._widgets[name]:
            if "/AP" in widget:
                del widget["/AP"]
        self.acro_form[NameObject("/NeedAppearances")] = BooleanObject(True)

    def check(self, name: str) -> None:
        node = self._node(name)
        widgets = self._widgets[name]
        on_state = _on_state(widgets[0])
        node[NameObject("/V")] = NameObject(on_state)
        for widget in widgets:
            widget[NameObject("/AS")] = NameObject(_on_state(widget))

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        try:
            self.writer.write(buffer)
        except Exception as exc:
            raise FormWriteError(f"Cannot serialize {self.source}: {exc}") from exc
        result = buffer.getvalue()
        if self.font_size:
            result = fix_font_sizes(result, self.font_size)
        return result


def fix_font_sizes(pdf_bytes: bytes, font_size: int = DEFAULT_FONT_SIZE) -> bytes:
    """
    Reset text widget font sizes with PyMuPDF and regenerate their appearance.

    Returns the original bytes when PyMuPDF cannot process the document.
    """
    try:
        pdf_doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as exc:
        logger.error("Failed to open PDF for font size fix: %s", exc, exc_info=True)
        return pdf_bytes

    try:
        updated = False
        for page in pdf_doc:
            for widget in page.widgets():
                if widget.field_type == fitz.PDF_WIDGET_TYPE_TEXT:
                    widget.text_fontsize = font_size
                    widget.update()
                    updated = True
        return pdf_doc.tobytes() if updated else pdf_bytes
    except Exception as exc:
        logger.error("Failed to adjust font sizes: %s", exc, exc_info=True)
        return pdf_bytes
    finally:
        pdf_doc.close()
