from typing import Dict, List, Optional

import pytest
from pypdf import PdfWriter
from pypdf.generic import ArrayObject, DictionaryObject, FloatObject, NameObject, NumberObject, TextStringObject

from wohngeld_prefill.fields import FieldDescriptor, FieldType
from wohngeld_prefill.pdf_utils import FLAG_MULTILINE, FLAG_PUSHBUTTON, FLAG_RADIO, FormField
from wohngeld_prefill.samples import sample_application


class FakeForm:
    """In-memory form implementing the FillableForm protocol."""

    source = "fake.pdf"

    def __init__(self, fields: List[FormField], fail_on=(), payload: bytes = b"%PDF-1.7 fake"):
        self.fields = list(fields)
        self.fail_on = set(fail_on)
        self.payload = payload
        self.texts: Dict[str, str] = {}
        self.checked: List[str] = []

    def iter_fields(self):
        return iter(self.fields)

    def set_text(self, name: str, value: str) -> None:
        if name in self.fail_on:
            raise RuntimeError(f"cannot write {name}")
        self.texts[name] = value

    def check(self, name: str) -> None:
        if name in self.fail_on:
            raise RuntimeError(f"cannot check {name}")
        self.checked.append(name)

    def to_bytes(self) -> bytes:
        return self.payload


def text(name: str, value: Optional[str] = None) -> FormField:
    return FormField(name=name, field_type="/Tx", value=value)


def multiline(name: str) -> FormField:
    return FormField(name=name, field_type="/Tx", flags=FLAG_MULTILINE)


def checkbox(name: str) -> FormField:
    return FormField(name=name, field_type="/Btn")


def radio(name: str) -> FormField:
    return FormField(name=name, field_type="/Btn", flags=FLAG_RADIO)


def pushbutton(name: str) -> FormField:
    return FormField(name=name, field_type="/Btn", flags=FLAG_PUSHBUTTON)


def text_descriptor(name: str) -> FieldDescriptor:
    return FieldDescriptor(name, FieldType.TEXT, False)


def date_descriptor(name: str) -> FieldDescriptor:
    return FieldDescriptor(name, FieldType.DATE, False)


def checkbox_descriptor(name: str) -> FieldDescriptor:
    return FieldDescriptor(name, FieldType.CHECKBOX, True)


@pytest.fixture
def application():
    return sample_application()


@pytest.fixture
def sample_payload():
    return sample_application().model_dump()


def write_form_pdf(path, specs):
    """Write a one-page AcroForm PDF with a widget per (name, field_type, flags) entry."""
    writer = PdfWriter()
    page = writer.add_blank_page(width=595, height=842)
    refs = ArrayObject()
    for i, (name, field_type, flags) in enumerate(specs):
        top = 800 - 30 * i
        widget = DictionaryObject(
            {
                NameObject("/Type"): NameObject("/Annot"),
                NameObject("/Subtype"): NameObject("/Widget"),
                NameObject("/FT"): NameObject(field_type),
                NameObject("/T"): TextStringObject(name),
                NameObject("/Ff"): NumberObject(flags),
                NameObject("/Rect"): ArrayObject(
                    [FloatObject(50), FloatObject(top - 20), FloatObject(300), FloatObject(top)]
                ),
            }
        )
        refs.append(writer._add_object(widget))
    page[NameObject("/Annots")] = ArrayObject(refs)
    writer._root_object[NameObject("/AcroForm")] = DictionaryObject({NameObject("/Fields"): ArrayObject(refs)})
    with open(path, "wb") as fh:
        writer.write(fh)
    return path


@pytest.fixture
def form_pdf(tmp_path):
    return write_form_pdf(
        tmp_path / "template.pdf",
        [
            ("MZ1.3-ET_MieteGesamt", "/Tx", 0),
            ("MZ1.3-DA_PersAngGeburtsdatum", "/Tx", 0),
            ("MZ1.3-MTF_AllgWoGNR_AKZ", "/Tx", FLAG_MULTILINE),
            ("MZ1.3-CB_PersAngFamStandgeschieden", "/Btn", 0),
            ("MZ1.3-CB_PersAngFamStandledig", "/Btn", 0),
            ("Drucken", "/Btn", FLAG_PUSHBUTTON),
        ],
    )
