import pytest

from conftest import FakeForm, checkbox, multiline, pushbutton, radio, text
from wohngeld_prefill.exceptions import FormReadError
from wohngeld_prefill.fields import FieldType
from wohngeld_prefill.pdf_utils import FormField
from wohngeld_prefill.template_scanner import TemplateScanner

scanner = TemplateScanner()


def test_declared_types():
    form = FakeForm(
        [
            text("MZ1.3-ET_MieteGesamt", value="400,00"),
            text("MZ1.3-DA_PersAngGeburtsdatum"),
            multiline("MZ1.3-MTF_AllgWoGNR_AKZ"),
            checkbox("MZ1.3-CB_ZahlungAnMich"),
        ]
    )
    descriptors = scanner.extract(form)
    assert [(d.name, d.declared_type, d.is_checkbox) for d in descriptors] == [
        ("MZ1.3-ET_MieteGesamt", FieldType.TEXT, False),
        ("MZ1.3-DA_PersAngGeburtsdatum", FieldType.DATE, False),
        ("MZ1.3-MTF_AllgWoGNR_AKZ", FieldType.MULTILINE, False),
        ("MZ1.3-CB_ZahlungAnMich", FieldType.CHECKBOX, True),
    ]
    assert descriptors[0].current_value == "400,00"


def test_non_fillable_fields_are_skipped():
    form = FakeForm(
        [
            pushbutton("Drucken"),
            radio("Auswahl"),
            FormField(name="Unterschrift", field_type="/Sig"),
            text("MZ1.3-ET_PersAngVornamen"),
        ]
    )
    assert [d.name for d in scanner.extract(form)] == ["MZ1.3-ET_PersAngVornamen"]


def test_empty_form_warns(caplog):
    assert scanner.extract(FakeForm([])) == []
    assert "no fillable fields" in caplog.text


def test_scan_template(form_pdf):
    result = scanner.scan_template(form_pdf)
    assert result["template_file"] == "template.pdf"
    assert result["field_count"] == 5
    assert result["checkbox_count"] == 2
    assert result["has_fields"] is True
    assert "Drucken" not in result["form_fields"]
    assert result["field_types"]["MZ1.3-DA_PersAngGeburtsdatum"] == "date"
    assert result["field_types"]["MZ1.3-MTF_AllgWoGNR_AKZ"] == "multiline"


def test_scan_missing_template(tmp_path):
    with pytest.raises(FormReadError):
        scanner.scan_template(tmp_path / "missing.pdf")
