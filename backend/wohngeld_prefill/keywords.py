"""
Keyword tables for field classification.

Keywords are written the way they appear on the form (with umlauts) and are
normalized once at import time, so they compare directly against
`normalize(field_name)`. The tables are read-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from .fields import FieldCategory
from .normalizer import normalize


def keywords(*words: str) -> Tuple[str, ...]:
    """Normalize and de-duplicate keywords, preserving order."""
    seen = []
    for word in words:
        key = normalize(word)
        if key and key not in seen:
            seen.append(key)
    return tuple(seen)


def contains_any(name: str, words: Iterable[str]) -> bool:
    return any(word in name for word in words)


@dataclass(frozen=True)
class CategoryRule:
    category: FieldCategory
    keywords: Tuple[str, ...]

    def matches(self, normalized_name: str) -> bool:
        return contains_any(normalized_name, self.keywords)


# Evaluation order matters: the first matching record wins. Rent and income
# keywords overlap ("Bruttomiete", "Nettokaltmiete"), so RENT precedes INCOME,
# and person names precede the address keywords ("Geburtsort").
CATEGORY_TABLE: Tuple[CategoryRule, ...] = (
    CategoryRule(
        FieldCategory.AUTHORITY,
        keywords(
            "Behörde", "Wohngeldbehörde", "Dienststelle", "Bezirksamt", "Landratsamt",
            "Stadtverwaltung", "Wohngeldstelle", "Wohngeldamt",
        ),
    ),
    CategoryRule(
        FieldCategory.APPLICATION_META,
        keywords(
            "Erstantrag", "Weiterleistung", "Folgeantrag", "Weiterbewilligung", "Antragstyp",
            "Aktenzeichen", "Wohngeldnummer", "WoGNR", "Antragsdatum", "Wohngeld ab",
            "Leistung ab", "Bewilligung ab", "formlos",
        ),
    ),
    CategoryRule(
        FieldCategory.PERSON,
        keywords(
            "Name", "Vorname", "Nachname", "Familienname", "Geburt", "Geschlecht", "männlich",
            "weiblich", "divers", "Familienstand", "FamStand", "ledig", "verheiratet",
            "geschieden", "verwitwet", "Staatsangehörigkeit", "Nationalität", "Telefon",
            "E-Mail", "PersAng",
        ),
    ),
    CategoryRule(
        FieldCategory.ADDRESS,
        keywords(
            "Straße", "Hausnummer", "Hausnr", "PLZ", "Postleitzahl", "Wohnort", "Ort", "Stadt",
            "Gemeinde", "Bundesland", "Anschrift", "Adresse",
        ),
    ),
    CategoryRule(
        FieldCategory.HOUSING,
        keywords(
            "Wohnung", "Wohnfläche", "Zimmer", "Räume", "Einzug", "Baujahr", "Vermieter",
            "Mieter", "Heimbewohner", "Eigentümer", "Wohnraum", "Wohnverhältnis", "IchBin",
            "Anzahl Personen", "Haushaltsgröße", "Mietpreisbindung", "gefördert", "Heizungsart",
        ),
    ),
    CategoryRule(
        FieldCategory.RENT,
        keywords(
            "Miete", "Kaltmiete", "Warmmiete", "Nebenkosten", "Heizkosten", "Betriebskosten",
            "Warmwasser",
        ),
    ),
    CategoryRule(
        FieldCategory.INCOME,
        keywords(
            "Einkommen", "Einnahme", "Verdienst", "Gehalt", "Lohn", "brutto", "netto", "Rente",
            "Kindergeld", "Unterhalt",
        ),
    ),
    CategoryRule(
        FieldCategory.EMPLOYMENT_STATUS,
        keywords(
            "Erwerb", "erwerbstätig", "Arbeitnehmer", "arbeitslos", "Rentner", "Student", "Studierend",
            "Schüler", "Azubi", "selbständig", "selbstständig",
        ),
    ),
    CategoryRule(
        FieldCategory.BANK,
        keywords(
            "IBAN", "BIC", "Bank", "Konto", "Kreditinstitut", "Geldinstitut", "Sparkasse",
            "Auszahlung", "Zahlung",
        ),
    ),
    CategoryRule(FieldCategory.YES_NO, keywords("ja", "nein", "yes")),
)


def match_category(
    normalized_name: str, table: Sequence[CategoryRule] = CATEGORY_TABLE
) -> Optional[FieldCategory]:
    for rule in table:
        if rule.matches(normalized_name):
            return rule.category
    return None
