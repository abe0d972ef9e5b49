"""
Resolution rules for classified fields.

All tables are module-level tuples built once at import. Keywords go through
`keywords()` so they compare against normalized field names; the extractors
read the application and return None when the attribute is absent.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Tuple

from .fields import FieldCategory
from .formatting import compact
from .keywords import contains_any, keywords
from .models import HousingBenefitApplication, IncomeEntry
from .normalizer import normalize

Extractor = Callable[[HousingBenefitApplication], Any]


def _path(*attrs: str) -> Extractor:
    """Extractor following an attribute path, None as soon as a link is missing."""

    def extract(application):
        value = application
        for attr in attrs:
            value = getattr(value, attr, None)
            if value is None:
                return None
        return value

    return extract


def _positive(*attrs: str) -> Extractor:
    """Like `_path`, but zero amounts count as absent."""
    inner = _path(*attrs)

    def extract(application):
        value = inner(application)
        if isinstance(value, (int, float)) and value == 0:
            return None
        return value

    return extract


def income_entries(application: HousingBenefitApplication) -> Tuple[IncomeEntry, ...]:
    """Income entries, falling back to the legacy monthly gross amount."""
    income = application.income
    if income.entries:
        return tuple(income.entries)
    if income.gross_monthly:
        return (IncomeEntry(kind="Einkommen", gross_amount=income.gross_monthly, frequency="monatlich"),)
    return ()


# -- checkbox option groups -------------------------------------------------


@dataclass(frozen=True)
class Option:
    label: str
    keywords: Tuple[str, ...]
    aliases: Tuple[str, ...]
    excludes: Tuple[str, ...] = ()

    def matches(self, name: str) -> bool:
        return contains_any(name, self.keywords) and not contains_any(name, self.excludes)

    def accepts(self, value: str) -> bool:
        return normalize(value) in self.aliases


@dataclass(frozen=True)
class OptionGroup:
    """Mutually exclusive checkboxes backed by one attribute."""

    name: str
    category: FieldCategory
    extract: Extractor
    options: Tuple[Option, ...]

    def matching(self, name: str) -> Tuple[Option, ...]:
        return tuple(option for option in self.options if option.matches(name))


def _application_type(application):
    return "erstantrag" if application.application.first_application else "weiterleistung"


OPTION_GROUPS: Tuple[OptionGroup, ...] = (
    OptionGroup(
        "application_type",
        FieldCategory.APPLICATION_META,
        _application_type,
        (
            Option("first", keywords("Erstantrag"), keywords("erstantrag", "first"), keywords("weiter", "folge")),
            Option(
                "continuation",
                keywords("Weiterleistung", "Folgeantrag", "Weiterbewilligung"),
                keywords("weiterleistung", "folgeantrag", "weiterbewilligung", "continuation"),
            ),
        ),
    ),
    OptionGroup(
        "gender",
        FieldCategory.PERSON,
        _path("applicant", "gender"),
        (
            Option("male", keywords("männlich"), keywords("männlich", "mann", "m", "male")),
            Option("female", keywords("weiblich"), keywords("weiblich", "frau", "w", "f", "female")),
            Option("diverse", keywords("divers"), keywords("divers", "d", "diverse", "other")),
            Option("unspecified", keywords("keine Angabe"), keywords("keine Angabe", "ohne Angabe", "unspecified")),
        ),
    ),
    OptionGroup(
        "marital_status",
        FieldCategory.PERSON,
        _path("applicant", "marital_status"),
        (
            Option("single", keywords("ledig"), keywords("ledig", "single")),
            Option("married", keywords("verheiratet"), keywords("verheiratet", "married"), keywords("nicht verheiratet")),
            Option(
                "separated",
                keywords("getrennt"),
                keywords("getrennt lebend", "dauernd getrennt lebend", "getrennt", "separated"),
            ),
            Option(
                "registered_partnership",
                keywords("Lebenspartner"),
                keywords(
                    "eingetragene Lebenspartnerschaft", "eingetragener Lebenspartner", "Lebenspartnerschaft",
                    "Lebenspartner", "registered partnership", "civil partnership",
                ),
                keywords("nichtehelich"),
            ),
            Option("divorced", keywords("geschieden"), keywords("geschieden", "divorced"), keywords("nicht geschieden")),
            Option("widowed", keywords("verwitwet"), keywords("verwitwet", "widowed")),
            Option(
                "cohabiting",
                keywords("nichtehelich"),
                keywords("nichteheliche Lebensgemeinschaft", "nichtehelich", "cohabiting"),
            ),
        ),
    ),
    OptionGroup(
        "employment_status",
        FieldCategory.EMPLOYMENT_STATUS,
        _path("applicant", "employment_status"),
        (
            Option(
                "employed",
                keywords("Arbeitnehmer", "erwerbstätig", "angestellt"),
                keywords("erwerbstätig", "Arbeitnehmer", "Arbeitnehmerin", "angestellt", "Angestellte", "employed", "employee"),
                keywords("nicht erwerbstätig", "Nichterwerb"),
            ),
            Option(
                "self_employed",
                keywords("selbständig", "selbstständig"),
                keywords("selbstständig", "selbständig", "Selbstständiger", "Selbständiger", "freiberuflich", "self-employed"),
            ),
            Option(
                "student",
                keywords("Student", "Studierend"),
                keywords("Student", "Studentin", "Studierende", "Studierender", "studierend"),
            ),
            Option(
                "trainee",
                keywords("Azubi", "Auszubildend", "Schüler"),
                keywords("Azubi", "Auszubildender", "Auszubildende", "Schüler", "Schülerin", "trainee"),
            ),
            Option("retired", keywords("Rentner"), keywords("Rentner", "Rentnerin", "Pensionär", "Pensionärin", "retired", "pensioner")),
            Option("unemployed", keywords("arbeitslos"), keywords("arbeitslos", "arbeitsuchend", "unemployed")),
            Option("not_employed", keywords("Nichterwerbsperson"), keywords("Nichterwerbsperson", "not employed")),
        ),
    ),
    OptionGroup(
        "tenancy",
        FieldCategory.HOUSING,
        _path("housing", "tenancy"),
        (
            Option("main_tenant", keywords("Hauptmieter"), keywords("Hauptmieter", "Hauptmieterin", "Mieter", "tenant")),
            Option("subtenant", keywords("Untermieter"), keywords("Untermieter", "Untermieterin", "subtenant")),
            Option("care_home", keywords("Heimbewohner"), keywords("Heimbewohner", "Heimbewohnerin", "care home resident")),
            Option(
                "owner",
                keywords("Eigentum", "Eigentümer", "BewohnerMehr"),
                keywords("Eigentum", "Eigentümer", "Eigentümerin", "owner"),
            ),
        ),
    ),
)


# -- independent checkboxes ---------------------------------------------------


@dataclass(frozen=True)
class FlagRule:
    """A single checkbox mirroring one boolean attribute."""

    pattern: "re.Pattern[str]"
    extract: Extractor


FLAG_RULES: Tuple[FlagRule, ...] = (
    FlagRule(re.compile(r"steuern$"), _path("income", "pays_taxes")),
    FlagRule(re.compile(r"(rvlv|rentenversicherung)$"), _path("income", "pays_pension_insurance")),
    FlagRule(
        re.compile(r"(kv|krankenversicherung|pflegeversicherung)$"), _path("income", "pays_health_insurance")
    ),
    FlagRule(re.compile(r"zahlunganmich$"), lambda application: application.bank is not None),
)


@dataclass(frozen=True)
class YesNoTopic:
    """A yes/no question; the field name carries the topic and a trailing ja/nein."""

    name: str
    keywords: Tuple[str, ...]
    extract: Extractor


YES_NO_TOPICS: Tuple[YesNoTopic, ...] = (
    YesNoTopic("other_dwelling", keywords("andere Wohnung"), _path("supplemental", "other_dwelling_benefit")),
    YesNoTopic("secondary_residence", keywords("Zweitwohnsitz"), _path("supplemental", "secondary_residence")),
    YesNoTopic("member_deceased", keywords("HHM Tod", "verstorben"), _path("supplemental", "household_member_deceased")),
    YesNoTopic("household_size", keywords("HHM Anzahl"), _path("supplemental", "household_size_change")),
    YesNoTopic("transfer_benefits", keywords("Transf Leistung", "Transferleistung"), _path("supplemental", "transfer_benefits")),
    YesNoTopic(
        "asked_to_apply", keywords("Wohngeld beantragen", "aufgefordert"), _path("supplemental", "asked_to_apply")
    ),
    YesNoTopic("work_expenses", keywords("FreiB Werb", "Werbungskosten"), _path("supplemental", "work_expenses")),
    YesNoTopic("childcare", keywords("Kinderbetreu"), _path("supplemental", "childcare_costs")),
    YesNoTopic("disability", keywords("SchwerBe", "Pflegegrad"), _path("supplemental", "disability_or_care")),
    YesNoTopic(
        "maintenance_paid", keywords("FreiB Unterh", "Unterhaltszahlung"), _path("supplemental", "maintenance_payments")
    ),
    YesNoTopic(
        "maintenance_unenforced",
        keywords("SonstEin Unterh", "Unterhaltsanspruch"),
        _path("supplemental", "unenforced_maintenance"),
    ),
    YesNoTopic("one_time_income", keywords("SonstEin Einm", "einmalig"), _path("supplemental", "one_time_income")),
    YesNoTopic("assets", keywords("Vermögen"), _path("supplemental", "assets_above_threshold")),
    YesNoTopic("third_party_costs", keywords("Kostentragen"), _path("supplemental", "third_party_pays_costs")),
    YesNoTopic(
        "additional_persons", keywords("Weitere Personen"), _path("supplemental", "additional_household_persons")
    ),
    YesNoTopic("related_to_landlord", keywords("verwandt"), _path("housing", "related_to_landlord")),
    YesNoTopic("rent_controlled", keywords("gefördert", "Mietpreisbindung"), _path("housing", "rent_controlled")),
    YesNoTopic("rent_third_party", keywords("Miete Dritte"), _path("rent", "third_party_payment")),
    YesNoTopic("rent_other_person", keywords("Miete Andere Pers"), _path("rent", "other_person_payment")),
)

YES_SUFFIXES = keywords("ja", "yes")
NO_SUFFIXES = keywords("nein", "no")


# -- text and date fields -----------------------------------------------------


class ValueKind(str, Enum):
    TEXT = "text"
    DATE = "date"
    MONEY = "money"
    DECIMAL = "decimal"
    INTEGER = "integer"


@dataclass(frozen=True)
class TextRule:
    category: FieldCategory
    keywords: Tuple[str, ...]
    extract: Extractor
    kind: ValueKind = ValueKind.TEXT
    requires: Tuple[str, ...] = ()
    excludes: Tuple[str, ...] = ()

    def matches(self, name: str) -> bool:
        if not contains_any(name, self.keywords):
            return False
        if self.requires and not contains_any(name, self.requires):
            return False
        return not contains_any(name, self.excludes)


def _full_name(application):
    return application.applicant.full_name


def _full_address(application):
    return application.address.full_address


def _account_holder(application):
    return application.bank.account_holder or application.applicant.full_name


def _housing_benefit_number(application):
    meta = application.application
    return None if meta.first_application else meta.housing_benefit_number


_A = FieldCategory.AUTHORITY
_M = FieldCategory.APPLICATION_META
_P = FieldCategory.PERSON
_AD = FieldCategory.ADDRESS
_H = FieldCategory.HOUSING
_R = FieldCategory.RENT
_I = FieldCategory.INCOME
_E = FieldCategory.EMPLOYMENT_STATUS
_B = FieldCategory.BANK

_INCOME_WORDS = keywords("Einkommen", "Einnahme", "Gehalt", "Lohn", "Verdienst")

TEXT_RULES: Tuple[TextRule, ...] = (
    TextRule(_A, keywords("Straße"), _path("application", "authority_street")),
    TextRule(_A, keywords("PLZ", "Postleitzahl"), _path("application", "authority_zip")),
    TextRule(_A, keywords("Ort", "Stadt", "Gemeinde"), _path("application", "authority_city")),
    TextRule(
        _A,
        keywords("Name", "Bezeichnung", "Behörde", "Dienststelle", "Wohngeldstelle", "Amt"),
        _path("application", "authority_name"),
    ),
    TextRule(_M, keywords("Wohngeldnummer", "WoGNR", "Aktenzeichen"), _housing_benefit_number),
    TextRule(_M, keywords("Antragsdatum"), _path("application", "application_date"), ValueKind.DATE),
    TextRule(
        _M, keywords("Wohngeld ab", "Leistung ab", "Bewilligung ab"), _path("application", "benefit_start"), ValueKind.DATE
    ),
    TextRule(_M, keywords("formlos"), _path("application", "informal_application_date"), ValueKind.DATE),
    TextRule(_P, keywords("Familienname", "Nachname", "last name", "surname"), _path("applicant", "last_name")),
    TextRule(_P, keywords("Vorname", "first name"), _path("applicant", "first_name")),
    TextRule(_P, keywords("Geburtsdatum", "Geburtstag", "birth date"), _path("applicant", "birth_date"), ValueKind.DATE),
    TextRule(_P, keywords("Geburtsort", "birth place"), _path("applicant", "birth_place")),
    TextRule(_P, keywords("Geburtsname"), _path("applicant", "birth_name")),
    TextRule(_P, keywords("Staatsangehörigkeit", "Nationalität", "nationality"), _path("applicant", "nationality")),
    TextRule(_P, keywords("Telefon", "phone"), _path("applicant", "phone")),
    TextRule(_P, keywords("E-Mail", "Mail"), _path("applicant", "email")),
    TextRule(_P, keywords("Anrede"), _path("applicant", "salutation")),
    TextRule(
        _P,
        keywords("Name"),
        _full_name,
        excludes=keywords("Bank", "Vermieter", "Behörde", "Geburt", "Kontoinhaber"),
    ),
    TextRule(_AD, keywords("Straße", "street"), _path("address", "street"), excludes=keywords("Vermieter", "Behörde")),
    TextRule(_AD, keywords("Hausnummer", "Hausnr"), _path("address", "house_number")),
    TextRule(_AD, keywords("Postleitzahl", "PLZ"), _path("address", "zip_code"), excludes=keywords("Vermieter", "Behörde")),
    TextRule(
        _AD,
        keywords("Wohnort", "Ort", "Stadt", "Gemeinde"),
        _path("address", "city"),
        excludes=keywords("Geburt", "Vermieter", "Behörde"),
    ),
    TextRule(_AD, keywords("Bundesland"), _path("address", "state")),
    TextRule(
        _AD,
        keywords("Anschrift", "Adresse"),
        _full_address,
        excludes=keywords("Datum", "Einzug", "Vermieter", "Mail"),
    ),
    TextRule(_H, keywords("Einzug"), _path("housing", "move_in_date"), ValueKind.DATE),
    TextRule(
        _H,
        keywords("Wohnfläche", "Größe Wohnung", "Größe", "qm", "Quadratmeter"),
        _path("housing", "living_area_sqm"),
        ValueKind.DECIMAL,
    ),
    TextRule(_H, keywords("Zimmer", "Räume"), _path("housing", "rooms"), ValueKind.INTEGER),
    TextRule(_H, keywords("Baujahr", "bezugsfertig"), _path("housing", "construction_year")),
    TextRule(_H, keywords("Heizungsart", "Heizart"), _path("housing", "heating_type")),
    TextRule(
        _H, keywords("Vermieter"), _path("housing", "landlord_address"), requires=keywords("Anschrift", "Adresse", "Straße")
    ),
    TextRule(_H, keywords("Vermieter"), _path("housing", "landlord_name"), excludes=keywords("verwandt")),
    TextRule(
        _H, keywords("Anzahl Personen", "Haushaltsgröße", "Personenzahl"), _path("household", "size"), ValueKind.INTEGER
    ),
    TextRule(
        _R,
        keywords("Miete gesamt", "Gesamtmiete", "Gesamtbetrag", "Bruttomiete", "Warmmiete"),
        lambda application: application.rent.total,
        ValueKind.MONEY,
    ),
    TextRule(_R, keywords("Kaltmiete", "Grundmiete"), _path("rent", "cold_rent"), ValueKind.MONEY),
    TextRule(_R, keywords("Nebenkosten", "Betriebskosten"), _positive("rent", "service_charges"), ValueKind.MONEY),
    TextRule(
        _R, keywords("Heizkost"), _positive("rent", "heating_costs"), ValueKind.MONEY, excludes=keywords("Heizungsart")
    ),
    TextRule(_R, keywords("Warmwasser"), _positive("rent", "hot_water_costs"), ValueKind.MONEY),
    TextRule(_R, keywords("Garage", "Stellplatz"), _positive("rent", "garage_costs"), ValueKind.MONEY),
    TextRule(_R, keywords("Service"), _positive("rent", "service_fees"), ValueKind.MONEY),
    TextRule(_R, keywords("Haushaltsenergie"), _positive("rent", "household_energy_costs"), ValueKind.MONEY),
    TextRule(_I, keywords("brutto"), _path("income", "gross_monthly"), ValueKind.MONEY, requires=_INCOME_WORDS),
    TextRule(_I, keywords("netto"), _path("income", "net_monthly"), ValueKind.MONEY, requires=_INCOME_WORDS),
    TextRule(
        _I,
        keywords("sonstige Einkünfte", "sonstige Einnahmen", "sonstiges Einkommen"),
        _positive("income", "other_income"),
        ValueKind.MONEY,
    ),
    TextRule(_I, keywords("Kindergeld"), _positive("income", "child_benefit"), ValueKind.MONEY),
    TextRule(_I, keywords("Unterhalt"), _positive("income", "maintenance"), ValueKind.MONEY),
    TextRule(_E, keywords("Beruf", "Tätigkeit", "Erwerbsstatus"), _path("applicant", "employment_status")),
    TextRule(_B, keywords("IBAN"), lambda application: compact(application.bank.iban)),
    TextRule(_B, keywords("BIC", "SWIFT"), lambda application: compact(application.bank.bic)),
    TextRule(_B, keywords("Kontoinhaber", "Inhaber"), _account_holder),
    TextRule(_B, keywords("Bank", "Kreditinstitut", "Geldinstitut"), _path("bank", "bank_name")),
)


# -- repeated entries and character-split fields -------------------------------

INCOME_SLOT = re.compile(r"(?:art|einnahme|eintrag|position)(\d{1,2})(brutto|betrag|turnus|haeufigkeit|zeitraum)?$")
AMOUNT_SUFFIXES = ("brutto", "betrag")
FREQUENCY_SUFFIXES = ("turnus", "haeufigkeit", "zeitraum")

CHARACTER_SPLIT = re.compile(r"(iban|bic)(\d{1,2})$")
SPLIT_WIDTHS = {"iban": 33, "bic": 11}
SPLIT_SOURCES = {"iban": _path("bank", "iban"), "bic": _path("bank", "bic")}


def rules_for(category: FieldCategory) -> Tuple[TextRule, ...]:
    return tuple(rule for rule in TEXT_RULES if rule.category == category)


def option_groups_for(category: Optional[FieldCategory]) -> Tuple[OptionGroup, ...]:
    """Option groups with those of `category` first."""
    own = tuple(group for group in OPTION_GROUPS if group.category == category)
    return own + tuple(group for group in OPTION_GROUPS if group.category != category)


def option(group_name: str, label: str) -> Option:
    for group in OPTION_GROUPS:
        if group.name == group_name:
            for candidate in group.options:
                if candidate.label == label:
                    return candidate
    raise KeyError(f"Unknown option {group_name}.{label}")
