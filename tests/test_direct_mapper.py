from wohngeld_prefill.direct_mapper import DirectTableBinder
from wohngeld_prefill.models import IncomeEntry

binder = DirectTableBinder(max_income_entries=4)


def test_applicant_fields(application):
    table = binder.build_table(application)
    assert table["MZ1.3-ET_PersAngFamilienname"] == "Beispiel"
    assert table["MZ1.3-ET_PersAngVornamen"] == "Maria"
    assert table["MZ1.3-DA_PersAngGeburtsdatum"] == "23.05.1962"
    assert table["MZ1.3-CB_PersAngGeschlechtWeiblich"] is True
    assert table["MZ1.3-CB_PersAngGeschlechtMännlich"] is False
    assert table["MZ1.3-CB_PersAngFamStandgeschieden"] is True
    assert table["MZ1.3-CB_PersAngFamStandledig"] is False
    assert table["MZ1.3-CB_PersAngErwerbRentner"] is True


def test_rent_and_cost_checkboxes(application):
    table = binder.build_table(application)
    assert table["MZ1.3-ET_MieteGesamt"] == "463,25"
    assert table["MZ1.3-ET_MieteGrößeWohnung"] == "45,00"

    assert table["MZ1.3-CB_MonatMieteHeizkostemJaGesond"] is True
    assert table["MZ1.3-CB_MonatMieteHeizkostemNein"] is False
    assert table["MZ1.3-ET_MonatMieteHeizkostemBetrag"] == "61,50"

    assert table["MZ1.3-CB_MonatMieteWarmwasserNein"] is True
    assert table["MZ1.3-CB_MonatMieteWarmwasserJaGesond"] is False
    assert "MZ1.3-ET_MonatMieteWarmwasserBetrag" not in table

    assert table["MZ1.3-CB_MieteVerändNein"] is True
    assert table["MZ1.3-CB_MieteVerändJaErhöhen"] is False


def test_heating_included_in_rent(application):
    application.rent.heating_included = True
    table = binder.build_table(application)
    assert table["MZ1.3-CB_MonatMieteHeizkostemJa"] is True
    assert table["MZ1.3-CB_MonatMieteHeizkostemJaGesond"] is False
    assert "MZ1.3-ET_MonatMieteHeizkostemBetrag" not in table


def test_income_entries(application):
    table = binder.build_table(application)
    assert table["MZ1.3-ET_EinnahmeHHM1Art1"] == "Erwerbsminderungsrente"
    assert table["MZ1.3-ET_EinnahmeHHM1Art1Brutto"] == "855,42"
    assert table["MZ1.3-ET_EinnahmeHHM1Art2Brutto"] == "38,49"
    assert table["MZ1.3-ET_EinnahmeHHM1Art2Turnus"] == "monatlich"
    assert not [name for name in table if "Art3" in name]
    assert table["MZ1.3-CB_EinnahmeHHM1KV"] is True
    assert table["MZ1.3-CB_EinnahmeHHM1Steuern"] is False


def test_surplus_income_entries_are_dropped(application, caplog):
    application.income.entries = [IncomeEntry(kind=f"Einnahme {i}", gross_amount=10 * i) for i in range(1, 7)]
    table = DirectTableBinder(max_income_entries=4).build_table(application)
    assert table["MZ1.3-ET_EinnahmeHHM1Art4Brutto"] == "40,00"
    assert "MZ1.3-ET_EinnahmeHHM1Art5" not in table
    assert "dropping 2" in caplog.text


def test_iban_characters(application):
    table = binder.build_table(application)
    iban = "".join(table[f"MZ1.3-AN_IBAN{i}"] for i in range(1, 23))
    assert iban == "DE89370400440532013000"
    assert "MZ1.3-AN_IBAN23" not in table
    assert table["MZ1.3-CB_ZahlungAnMich"] is True
    assert table["MZ1.3-ET_AuszahlungNameBank"] == "Sparkasse Potsdam"
    assert table["MZ1.3-ET_AuszahlungAnschrift"] == "Heilig-Geist-Str. 3, 14467 Potsdam"


def test_supplemental_answers(application):
    table = binder.build_table(application)
    assert table["MZ1.3-CB_TransfLeistungJa"] is True
    assert table["MZ1.3-CB_TransfLeistungNein"] is False
    assert table["MZ1.3-CB_FreiBSchwerBeJa"] is True
    assert table["MZ1.3-CB_SonstEinErhNein"] is True
    assert table["MZ1.3-CB_SonstEinErhJaErh"] is False
    assert table["MZ1.3-CB_HinweisAbfrage"] is True


def test_income_change_direction(application):
    application.supplemental.income_change = True
    application.supplemental.income_change_direction = "verringern"
    table = binder.build_table(application)
    assert table["MZ1.3-CB_SonstEinErhNein"] is False
    assert table["MZ1.3-CB_SonstEinErhJaVer"] is True
    assert table["MZ1.3-CB_SonstEinErhJaErh"] is False


def test_continuation_application(application):
    application.application.first_application = False
    application.application.housing_benefit_number = "WG-4711"
    table = binder.build_table(application)
    assert table["MZ1.3-CB_AllgAntragstyp_Erstantrag"] is False
    assert table["MZ1.3-CB_AllgAntragstyp_Weiterleistungsantrag"] is True
    assert table["MZ1.3-MTF_AllgWoGNR_AKZ"] == "WG-4711"


def test_absent_values_are_omitted(application):
    table = binder.build_table(application)
    assert "MZ1.3-ET_PersAngGeburtsort" not in table
    assert "MZ1.3-ET_PersAngE-Mail" not in table
    assert "MZ1.3-MTF_AllgWoGNR_AKZ" not in table
    assert all(value is not None and value != "" for value in table.values())


def test_bind_ignores_descriptors(application):
    assert binder.bind(application, []) == binder.build_table(application)


def test_students_use_the_trainee_box(application):
    application.applicant.employment_status = "Studentin"
    table = binder.build_table(application)
    assert table["MZ1.3-CB_PersAngErwerbAzubi"] is True
    assert table["MZ1.3-CB_PersAngErwerbRentner"] is False
