import pytest
from pypdf import PdfReader, PdfWriter

from conftest import write_form_pdf
from wohngeld_prefill.exceptions import FormReadError
from wohngeld_prefill.pdf_utils import PdfForm, fix_font_sizes


def test_iter_fields_reads_acroform(form_pdf):
    form = PdfForm.open(form_pdf, font_size=0)
    fields = {field.name: field for field in form.iter_fields()}
    assert list(fields) == [
        "MZ1.3-ET_MieteGesamt",
        "MZ1.3-DA_PersAngGeburtsdatum",
        "MZ1.3-MTF_AllgWoGNR_AKZ",
        "MZ1.3-CB_PersAngFamStandgeschieden",
        "MZ1.3-CB_PersAngFamStandledig",
        "Drucken",
    ]
    assert fields["MZ1.3-MTF_AllgWoGNR_AKZ"].is_multiline
    assert fields["Drucken"].is_pushbutton
    assert fields["MZ1.3-CB_PersAngFamStandledig"].field_type == "/Btn"
    assert not fields["MZ1.3-CB_PersAngFamStandledig"].is_radio


def test_set_text_and_check(form_pdf, tmp_path):
    form = PdfForm.open(form_pdf, font_size=0)
    form.set_text("MZ1.3-ET_MieteGesamt", "463,25")
    form.check("MZ1.3-CB_PersAngFamStandgeschieden")
    out = tmp_path / "filled.pdf"
    out.write_bytes(form.to_bytes())

    reader = PdfReader(str(out))
    assert reader.get_form_text_fields()["MZ1.3-ET_MieteGesamt"] == "463,25"
    fields = reader.get_fields()
    assert fields["MZ1.3-CB_PersAngFamStandgeschieden"]["/V"] == "/Yes"
    assert fields["MZ1.3-CB_PersAngFamStandledig"].get("/V") is None


def test_unknown_field_raises_key_error(form_pdf):
    form = PdfForm.open(form_pdf, font_size=0)
    with pytest.raises(KeyError):
        form.set_text("Nope", "x")


def test_missing_file(tmp_path):
    with pytest.raises(FormReadError, match="not found"):
        PdfForm.open(tmp_path / "missing.pdf")


def test_corrupt_file(tmp_path):
    broken = tmp_path / "broken.pdf"
    broken.write_bytes(b"this is not a pdf")
    with pytest.raises(FormReadError):
        PdfForm.open(broken)


def test_pdf_without_acroform(tmp_path):
    path = tmp_path / "plain.pdf"
    writer = PdfWriter()
    writer.add_blank_page(width=595, height=842)
    with open(path, "wb") as fh:
        writer.write(fh)
    form = PdfForm.open(path)
    with pytest.raises(FormReadError, match="AcroForm"):
        list(form.iter_fields())


def test_fix_font_sizes_keeps_unreadable_input():
    assert fix_font_sizes(b"not a pdf", 11) == b"not a pdf"


def test_empty_form(tmp_path):
    form = PdfForm.open(write_form_pdf(tmp_path / "empty.pdf", []), font_size=0)
    assert list(form.iter_fields()) == []
