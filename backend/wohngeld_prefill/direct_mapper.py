"""
Direct field mapping for the Wohngeld form "Antrag auf Mietzuschuss".

Maps exact PDF field names to values from the application. Field naming
convention of the form:

- MZ1.3-CB_  checkbox
- MZ1.3-ET_  text field
- MZ1.3-DA_  date field
- MZ1.3-AN_  IBAN character fields
- MZ1.3-MTF_ multi-line text field
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .binding import Binder, FieldTable
from .exceptions import MalformedValueError
from .fields import FieldDescriptor
from .formatting import compact, format_currency, format_decimal, normalize_frequency
from .models import HousingBenefitApplication
from .normalizer import normalize
from .rules import income_entries, option
from .resolver import DEFAULT_MAX_INCOME_ENTRIES

logger = logging.getLogger(__name__)

PREFIX = "MZ1.3-"
IBAN_WIDTH = 33


def _is(value: Optional[str], group: str, label: str) -> bool:
    return bool(value) and option(group, label).accepts(value)


def _put_formatted(table: FieldTable, name: str, formatter, value) -> None:
    try:
        table[name] = formatter(value)
    except MalformedValueError as exc:
        logger.warning("Skipping field %s: %s", name, exc)


def _yes_no(table: FieldTable, stem: str, answer: bool) -> None:
    table[f"{PREFIX}CB_{stem}Nein"] = not answer
    table[f"{PREFIX}CB_{stem}Ja"] = answer


def _cost_triple(table: FieldTable, stem: str, amount: Optional[float], included: bool = False) -> bool:
    """Nein / Ja (part of the rent) / JaGesond (paid separately). Returns True when paid separately."""
    separate = not included and bool(amount) and amount > 0
    table[f"{PREFIX}CB_{stem}Nein"] = not included and not separate
    table[f"{PREFIX}CB_{stem}Ja"] = included
    table[f"{PREFIX}CB_{stem}JaGesond"] = separate
    return separate


class DirectTableBinder(Binder):
    """Builds the canonical field table of the bundled template."""

    name = "direct"

    def __init__(self, max_income_entries: int = DEFAULT_MAX_INCOME_ENTRIES):
        self.max_income_entries = max_income_entries

    def bind(self, application: HousingBenefitApplication, descriptors: List[FieldDescriptor]) -> FieldTable:
        return self.build_table(application)

    def build_table(self, application: HousingBenefitApplication) -> FieldTable:
        """Field name -> value for every field the application determines."""
        table: FieldTable = {}
        self._map_application(table, application)
        self._map_applicant(table, application)
        self._map_address(table, application)
        self._map_housing(table, application)
        self._map_rent(table, application)
        self._map_income(table, application)
        self._map_bank(table, application)
        self._map_supplemental(table, application)
        return {name: value for name, value in table.items() if value is not None and value != ""}

    def _map_application(self, table: FieldTable, application: HousingBenefitApplication) -> None:
        meta = application.application
        table[f"{PREFIX}CB_AllgAntragstyp_Erstantrag"] = meta.first_application
        table[f"{PREFIX}CB_AllgAntragstyp_Weiterleistungsantrag"] = not meta.first_application
        if not meta.first_application:
            table[f"{PREFIX}MTF_AllgWoGNR_AKZ"] = meta.housing_benefit_number

    def _map_applicant(self, table: FieldTable, application: HousingBenefitApplication) -> None:
        a = application.applicant
        table[f"{PREFIX}ET_PersAngFamilienname"] = a.last_name
        table[f"{PREFIX}ET_PersAngVornamen"] = a.first_name
        table[f"{PREFIX}DA_PersAngGeburtsdatum"] = a.birth_date
        table[f"{PREFIX}ET_PersAngGeburtsort"] = a.birth_place
        table[f"{PREFIX}ET_PersAngGeburtsname"] = a.birth_name
        table[f"{PREFIX}ET_PersAngStaatsangehörigkeit"] = a.nationality
        table[f"{PREFIX}ET_PersAngTelefonnummer"] = a.phone
        table[f"{PREFIX}ET_PersAngE-Mail"] = a.email

        table[f"{PREFIX}CB_PersAngGeschlechtMännlich"] = _is(a.gender, "gender", "male")
        table[f"{PREFIX}CB_PersAngGeschlechtWeiblich"] = _is(a.gender, "gender", "female")
        table[f"{PREFIX}CB_PersAngGeschlechtDivers"] = _is(a.gender, "gender", "diverse")
        table[f"{PREFIX}CB_PersAngGeschlechtKeineAngabe"] = _is(a.gender, "gender", "unspecified")

        status = a.marital_status
        table[f"{PREFIX}CB_PersAngFamStandledig"] = _is(status, "marital_status", "single")
        table[f"{PREFIX}CB_PersAngFamStandverheiratet"] = _is(status, "marital_status", "married")
        table[f"{PREFIX}CB_PersAngFamStandgetrenntlebend"] = _is(status, "marital_status", "separated")
        table[f"{PREFIX}CB_PersAngFamStandeingLebenspartner"] = _is(status, "marital_status", "registered_partnership")
        table[f"{PREFIX}CB_PersAngFamStandgeschieden"] = _is(status, "marital_status", "divorced")
        table[f"{PREFIX}CB_PersAngFamStandverwitwet"] = _is(status, "marital_status", "widowed")
        table[f"{PREFIX}CB_PersAngFamStandnichtehelicheLebenspartner"] = _is(status, "marital_status", "cohabiting")

        employment = a.employment_status
        table[f"{PREFIX}CB_PersAngErwerbArbeitnehmer"] = _is(employment, "employment_status", "employed")
        table[f"{PREFIX}CB_PersAngErwerbSelbständiger"] = _is(employment, "employment_status", "self_employed")
        # the form has one box for pupils, trainees and students
        table[f"{PREFIX}CB_PersAngErwerbAzubi"] = _is(employment, "employment_status", "trainee") or _is(
            employment, "employment_status", "student"
        )
        table[f"{PREFIX}CB_PersAngErwerbRentner"] = _is(employment, "employment_status", "retired")
        table[f"{PREFIX}CB_PersAngErwerbArbeitslos"] = _is(employment, "employment_status", "unemployed")
        table[f"{PREFIX}CB_PersAngErwerbNichterwerbsperson"] = _is(employment, "employment_status", "not_employed")

    def _map_address(self, table: FieldTable, application: HousingBenefitApplication) -> None:
        adr = application.address
        table[f"{PREFIX}ET_WohnungAnschriftStraße"] = adr.street
        table[f"{PREFIX}ET_WohnungAnschriftHausnummer"] = adr.house_number
        table[f"{PREFIX}ET_WohnungAnschriftPostleitzahl"] = adr.zip_code
        table[f"{PREFIX}ET_WohnungAnschriftWohnort"] = adr.city

    def _map_housing(self, table: FieldTable, application: HousingBenefitApplication) -> None:
        w = application.housing
        if w is None:
            return
        _put_formatted(table, f"{PREFIX}ET_MieteGrößeWohnung", format_decimal, w.living_area_sqm)
        table[f"{PREFIX}DA_WohnungZKAnschriftEinzugsdatum"] = w.move_in_date

        table[f"{PREFIX}CB_IchBinHauptmieter"] = _is(w.tenancy, "tenancy", "main_tenant")
        table[f"{PREFIX}CB_IchBinUntermieter"] = _is(w.tenancy, "tenancy", "subtenant")
        table[f"{PREFIX}CB_IchBinHeimbewohner"] = _is(w.tenancy, "tenancy", "care_home")
        table[f"{PREFIX}CB_IchBinBewohnerMehr"] = _is(w.tenancy, "tenancy", "owner")

        # the "yes" box carries a doubled I in the template
        table[f"{PREFIX}CB_IchBinVerwandtVerNein"] = not w.related_to_landlord
        table[f"{PREFIX}CB_IIchBinVerwandtVerJa"] = w.related_to_landlord
        _yes_no(table, "WohnungGefördert", w.rent_controlled)

        table[f"{PREFIX}CB_NutzWohnraumBeruflich"] = w.business_use
        table[f"{PREFIX}CB_NutzWohnraumAndPersÜberlassen"] = w.sublet
        table[f"{PREFIX}CB_NutzWohnraumAndPersEntgeltlich"] = w.sublet_paid

    def _map_rent(self, table: FieldTable, application: HousingBenefitApplication) -> None:
        m = application.rent
        _put_formatted(table, f"{PREFIX}ET_MieteGesamt", format_currency, m.total)

        # "Heizkostem" is the template's spelling
        if _cost_triple(table, "MonatMieteHeizkostem", m.heating_costs, m.heating_included):
            _put_formatted(table, f"{PREFIX}ET_MonatMieteHeizkostemBetrag", format_currency, m.heating_costs)
        if _cost_triple(table, "MonatMieteWarmwasser", m.hot_water_costs, m.hot_water_included):
            _put_formatted(table, f"{PREFIX}ET_MonatMieteWarmwasserBetrag", format_currency, m.hot_water_costs)
        _cost_triple(table, "MonatMieteGarage", m.garage_costs)
        _cost_triple(table, "MonatMieteService", m.service_fees)
        _cost_triple(table, "MonatMieteHaushaltsenergie", m.household_energy_costs)

        change = normalize(m.expected_change or "")
        increase = change.startswith(("erhoeh", "increase", "hoeher"))
        decrease = change.startswith(("verringer", "decrease", "niedriger", "sink"))
        table[f"{PREFIX}CB_MieteVerändNein"] = not (increase or decrease)
        table[f"{PREFIX}CB_MieteVerändJaVerringern"] = decrease
        table[f"{PREFIX}CB_MieteVerändJaErhöhen"] = increase

        _yes_no(table, "MieteDritte", m.third_party_payment)
        _yes_no(table, "MieteAnderePers", m.other_person_payment)

    def _map_income(self, table: FieldTable, application: HousingBenefitApplication) -> None:
        a = application.applicant
        e = application.income
        # HHM1 = household member 1 = applicant
        table[f"{PREFIX}ET_EinnahmeHHM1Familienname"] = a.last_name
        table[f"{PREFIX}ET_EinnahmeHHM1Vorname"] = a.first_name

        entries = income_entries(application)
        if len(entries) > self.max_income_entries:
            logger.warning(
                "Form supports %d income entries, dropping %d",
                self.max_income_entries,
                len(entries) - self.max_income_entries,
            )
        for num, entry in enumerate(entries[: self.max_income_entries], start=1):
            table[f"{PREFIX}ET_EinnahmeHHM1Art{num}"] = entry.kind
            _put_formatted(table, f"{PREFIX}ET_EinnahmeHHM1Art{num}Brutto", format_currency, entry.gross_amount)
            table[f"{PREFIX}ET_EinnahmeHHM1Art{num}Turnus"] = normalize_frequency(entry.frequency)

        table[f"{PREFIX}CB_EinnahmeHHM1Steuern"] = e.pays_taxes
        table[f"{PREFIX}CB_EinnahmeHHM1RVLV"] = e.pays_pension_insurance
        table[f"{PREFIX}CB_EinnahmeHHM1KV"] = e.pays_health_insurance

    def _map_bank(self, table: FieldTable, application: HousingBenefitApplication) -> None:
        b = application.bank
        a = application.applicant
        table[f"{PREFIX}CB_ZahlungAnMich"] = True
        table[f"{PREFIX}CB_AuszahlungHHM"] = False

        iban = compact(b.iban) or ""
        for i, char in enumerate(iban[:IBAN_WIDTH], start=1):
            table[f"{PREFIX}AN_IBAN{i}"] = char

        table[f"{PREFIX}ET_AuszahlungNameBank"] = b.bank_name
        table[f"{PREFIX}ET_AuszahlungFamilienname"] = a.last_name
        table[f"{PREFIX}ET_AuszahlungVorname"] = a.first_name
        table[f"{PREFIX}ET_AuszahlungAnschrift"] = application.address.full_address

    def _map_supplemental(self, table: FieldTable, application: HousingBenefitApplication) -> None:
        z = application.supplemental
        _yes_no(table, "WohnungAndereWohnung", z.other_dwelling_benefit)
        _yes_no(table, "WohnungZweitwohnsitz", z.secondary_residence)
        _yes_no(table, "DrittStaatKostentragen", z.third_party_pays_costs)
        _yes_no(table, "WeiterePersonen", z.additional_household_persons)
        _yes_no(table, "VerändHHMTod", z.household_member_deceased)
        _yes_no(table, "VerändHHMVerstorben", z.household_member_deceased)
        _yes_no(table, "VerändHHMAnzahl", z.household_size_change)
        _yes_no(table, "TransfLeistung", z.transfer_benefits)
        _yes_no(table, "TransfWohngeldBeantragen", z.asked_to_apply)
        _yes_no(table, "FreiBWerb", z.work_expenses)
        _yes_no(table, "FreiBKinderbetreu", z.childcare_costs)
        _yes_no(table, "FreiBSchwerBe", z.disability_or_care)
        _yes_no(table, "FreiBUnterh", z.maintenance_payments)
        _yes_no(table, "SonstEinUnterh", z.unenforced_maintenance)
        _yes_no(table, "SonstEinEinm", z.one_time_income)
        _yes_no(table, "SonstEinVermögen", z.assets_above_threshold)

        direction = normalize(z.income_change_direction or "")
        decrease = z.income_change and direction.startswith(("verringer", "decrease", "sink"))
        table[f"{PREFIX}CB_SonstEinErhNein"] = not z.income_change
        table[f"{PREFIX}CB_SonstEinErhJaVer"] = decrease
        table[f"{PREFIX}CB_SonstEinErhJaErh"] = z.income_change and not decrease

        table[f"{PREFIX}CB_HinweisAbfrage"] = z.statement_consent
