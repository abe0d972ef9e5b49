import os

import pytest

from conftest import FakeForm, checkbox, pushbutton, text
from wohngeld_prefill.auto_mapper import ClassificationBinder
from wohngeld_prefill.binding import Binder, BindingEngine, lookup, normalized_index, write_atomically
from wohngeld_prefill.direct_mapper import DirectTableBinder
from wohngeld_prefill.exceptions import FormWriteError


class StaticBinder(Binder):
    name = "static"

    def __init__(self, table):
        self.table = table

    def bind(self, application, descriptors):
        return dict(self.table)


def sample_form(**kwargs):
    return FakeForm(
        [
            text("MZ1.3-ET_MieteGesamt"),
            text("MZ1.3-ET_PersAngStaatsangehörigkeit"),
            checkbox("MZ1.3-CB_PersAngFamStandgeschieden"),
            checkbox("MZ1.3-CB_PersAngFamStandledig"),
            text("MZ1.3-ET_Unbekannt"),
            pushbutton("Drucken"),
        ],
        **kwargs,
    )


def test_lookup_prefers_exact_key():
    table = {"MZ1.3-ET_Straße": "exact", "MZ1.3-ET_Strasse": "folded"}
    assert lookup(table, "MZ1.3-ET_Strasse") == "folded"
    assert lookup(table, "MZ1.3-ET_Straße") == "exact"


def test_lookup_tolerates_encoding_drift():
    table = {"MZ1.3-ET_PersAngStaatsangehörigkeit": "deutsch"}
    assert lookup(table, "MZ1.3-ET_PersAngStaatsangehÃ¶rigkeit") == "deutsch"
    assert lookup(table, "MZ1.3-ET_PersAngStaatsangehoerigkeit") == "deutsch"
    assert lookup(table, "MZ1.3-ET_Sonstiges") is None


def test_normalized_index_keeps_first_key():
    index = normalized_index({"A-b": 1, "ab": 2})
    assert index == {"ab": "A-b"}


def test_fill_counts_fields(application, tmp_path):
    form = sample_form()
    engine = BindingEngine(
        StaticBinder(
            {
                "MZ1.3-ET_MieteGesamt": "463,25",
                "MZ1.3-ET_PersAngStaatsangehÃ¶rigkeit": "deutsch",
                "MZ1.3-CB_PersAngFamStandgeschieden": True,
                "MZ1.3-CB_PersAngFamStandledig": False,
                "MZ1.3-ET_Unbekannt": "",
                "Nicht im Formular": "x",
            }
        )
    )
    summary = engine.fill(application, form, tmp_path / "out" / "antrag.pdf")

    assert summary.fields_found == 5
    assert summary.fields_filled == 3
    assert summary.filename == "antrag.pdf"
    assert (tmp_path / "out" / "antrag.pdf").read_bytes() == b"%PDF-1.7 fake"
    assert form.texts == {"MZ1.3-ET_MieteGesamt": "463,25", "MZ1.3-ET_PersAngStaatsangehörigkeit": "deutsch"}
    assert form.checked == ["MZ1.3-CB_PersAngFamStandgeschieden"]


def test_checkbox_accepts_true_string(application, tmp_path):
    form = sample_form()
    engine = BindingEngine(StaticBinder({"MZ1.3-CB_PersAngFamStandledig": "TRUE", "MZ1.3-CB_PersAngFamStandgeschieden": "ja"}))
    summary = engine.fill(application, form, tmp_path / "antrag.pdf")
    assert form.checked == ["MZ1.3-CB_PersAngFamStandledig"]
    assert summary.fields_filled == 1


def test_boolean_on_text_field_is_ignored(application, tmp_path):
    form = sample_form()
    summary = BindingEngine(StaticBinder({"MZ1.3-ET_MieteGesamt": True})).fill(
        application, form, tmp_path / "antrag.pdf"
    )
    assert form.texts == {}
    assert summary.fields_filled == 0


def test_failing_field_is_skipped(application, tmp_path, caplog):
    form = sample_form(fail_on={"MZ1.3-ET_MieteGesamt"})
    engine = BindingEngine(
        StaticBinder({"MZ1.3-ET_MieteGesamt": "463,25", "MZ1.3-CB_PersAngFamStandgeschieden": True})
    )
    summary = engine.fill(application, form, tmp_path / "antrag.pdf")
    assert summary.fields_filled == 1
    assert form.checked == ["MZ1.3-CB_PersAngFamStandgeschieden"]
    assert "MZ1.3-ET_MieteGesamt" in caplog.text


def test_serialization_failure(application, tmp_path):
    class BrokenForm(FakeForm):
        def to_bytes(self):
            raise ValueError("stream damaged")

    form = BrokenForm([text("MZ1.3-ET_MieteGesamt")])
    with pytest.raises(FormWriteError, match="stream damaged"):
        BindingEngine(StaticBinder({})).fill(application, form, tmp_path / "antrag.pdf")
    assert list(tmp_path.iterdir()) == []


def test_write_atomically_cleans_up(tmp_path, monkeypatch):
    def fail(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", fail)
    with pytest.raises(FormWriteError, match="disk full"):
        write_atomically(b"data", tmp_path / "antrag.pdf")
    assert list(tmp_path.iterdir()) == []


def test_write_atomically_replaces_existing(tmp_path):
    target = tmp_path / "antrag.pdf"
    target.write_bytes(b"old")
    assert write_atomically(b"new", target) == target
    assert target.read_bytes() == b"new"
    assert [p.name for p in tmp_path.iterdir()] == ["antrag.pdf"]


def test_fill_with_direct_table(tmp_path):
    form = sample_form()
    engine = BindingEngine(DirectTableBinder())
    summary = engine.fill_with_direct_table(
        {"MZ1.3-ET_MieteGesamt": "500,00", "MZ1.3-CB_PersAngFamStandledig": "true"}, form, tmp_path / "a.pdf"
    )
    assert summary.fields_filled == 2
    assert form.texts == {"MZ1.3-ET_MieteGesamt": "500,00"}
    assert form.checked == ["MZ1.3-CB_PersAngFamStandledig"]


@pytest.mark.parametrize("binder", [DirectTableBinder(), ClassificationBinder()])
def test_strategies_fill_the_same_core_fields(application, tmp_path, binder):
    form = sample_form()
    summary = BindingEngine(binder).fill(application, form, tmp_path / "a.pdf")
    assert form.texts["MZ1.3-ET_MieteGesamt"] == "463,25"
    assert form.texts["MZ1.3-ET_PersAngStaatsangehörigkeit"] == "deutsch"
    assert form.checked == ["MZ1.3-CB_PersAngFamStandgeschieden"]
    assert 0 <= summary.fields_filled <= summary.fields_found == 5


def test_bindings_previews_table(application):
    table = BindingEngine(ClassificationBinder()).bindings(application, sample_form())
    assert table["MZ1.3-ET_MieteGesamt"] == "463,25"
    assert table["MZ1.3-CB_PersAngFamStandledig"] is False
    assert "MZ1.3-ET_Unbekannt" not in table


@pytest.mark.parametrize("name", ["WohnungAnschriftStraße", "PersAngÄnderung", "Größe", "Übernahme"])
def test_lookup_repairs_latin1_decoded_names(name):
    garbled = name.encode("utf-8").decode("latin-1")
    assert garbled != name
    assert lookup({name: "x"}, garbled) == "x"
