"""
Value resolution for classified fields.

`ValueResolver.resolve` returns the value a field should receive, or None when
the field must be left untouched: unknown fields, fields of other household
members, checkboxes whose branch cannot be decided and values that fail to
format.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .exceptions import MalformedValueError
from .fields import ClassifiedField, FieldCategory, FieldType, FieldValue
from .formatting import compact, format_currency, format_integer, normalize_frequency
from .keywords import CATEGORY_TABLE, contains_any
from .models import HousingBenefitApplication
from .normalizer import normalize
from .rules import (
    AMOUNT_SUFFIXES,
    CHARACTER_SPLIT,
    FLAG_RULES,
    FREQUENCY_SUFFIXES,
    INCOME_SLOT,
    NO_SUFFIXES,
    SPLIT_SOURCES,
    SPLIT_WIDTHS,
    YES_NO_TOPICS,
    YES_SUFFIXES,
    ValueKind,
    income_entries,
    option_groups_for,
    rules_for,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_INCOME_ENTRIES = 4

_TEXT_CATEGORIES = tuple(
    rule.category for rule in CATEGORY_TABLE if rule.category is not FieldCategory.AUTHORITY
)


def format_value(value: Any, kind: ValueKind) -> Optional[str]:
    if value is None:
        return None
    if kind in (ValueKind.MONEY, ValueKind.DECIMAL):
        text = format_currency(value)
    elif kind is ValueKind.INTEGER:
        text = format_integer(value)
    else:
        text = str(value)
    return text or None


class ValueResolver:
    """Computes field values from a housing benefit application."""

    def __init__(self, max_income_entries: int = DEFAULT_MAX_INCOME_ENTRIES):
        self.max_income_entries = max_income_entries

    def resolve(self, field: ClassifiedField, application: HousingBenefitApplication) -> Optional[FieldValue]:
        if field.person_index > 1 or field.category is FieldCategory.OTHER:
            return None
        name = normalize(field.name)
        try:
            if field.is_checkbox:
                value = self._resolve_checkbox(field, name, application)
            else:
                value = self._resolve_text(field, name, application)
        except MalformedValueError as exc:
            logger.warning("Skipping field %s: %s", field.name, exc)
            return None
        logger.debug("Resolved %s -> %r", field.name, value)
        return value

    # checkboxes

    def _resolve_checkbox(self, field: ClassifiedField, name: str, application) -> Optional[bool]:
        for group in option_groups_for(field.category):
            options = group.matching(name)
            if not options:
                continue
            if len(options) > 1:
                logger.debug("Ambiguous %s options for %s", group.name, field.name)
                return None
            current = group.extract(application)
            if current is None or str(current).strip() == "":
                return None
            return options[0].accepts(str(current))

        for flag in FLAG_RULES:
            if flag.pattern.search(name):
                value = flag.extract(application)
                return None if value is None else bool(value)

        return self._resolve_yes_no(name, application)

    def _resolve_yes_no(self, name: str, application) -> Optional[bool]:
        topics = [topic for topic in YES_NO_TOPICS if contains_any(name, topic.keywords)]
        if len(topics) != 1:
            return None
        if name.endswith(NO_SUFFIXES):
            answer_yes = False
        elif name.endswith(YES_SUFFIXES):
            answer_yes = True
        else:
            return None
        value = topics[0].extract(application)
        if value is None:
            return None
        return bool(value) == answer_yes

    # text and date fields

    def _resolve_text(self, field: ClassifiedField, name: str, application) -> Optional[str]:
        if field.category is FieldCategory.INCOME:
            slot = INCOME_SLOT.search(name)
            if slot:
                return self._resolve_income_slot(int(slot.group(1)), slot.group(2), application)

        split = CHARACTER_SPLIT.search(name)
        if split:
            return self._resolve_character(split.group(1), int(split.group(2)), application)

        if field.category is FieldCategory.AUTHORITY:
            categories = (FieldCategory.AUTHORITY,)
        else:
            categories = (field.category,) + tuple(c for c in _TEXT_CATEGORIES if c is not field.category)

        date_only = field.declared_type is FieldType.DATE
        for category in categories:
            for rule in rules_for(category):
                if date_only and rule.kind is not ValueKind.DATE:
                    continue
                if not rule.matches(name):
                    continue
                value = format_value(rule.extract(application), rule.kind)
                if value:
                    return value
        return None

    def _resolve_income_slot(self, index: int, suffix: Optional[str], application) -> Optional[str]:
        entries = income_entries(application)
        if index < 1 or index > min(len(entries), self.max_income_entries):
            return None
        entry = entries[index - 1]
        if suffix in AMOUNT_SUFFIXES:
            return format_currency(entry.gross_amount)
        if suffix in FREQUENCY_SUFFIXES:
            return normalize_frequency(entry.frequency)
        return entry.kind or None

    def _resolve_character(self, source: str, position: int, application) -> Optional[str]:
        value = compact(SPLIT_SOURCES[source](application))
        if not value or position < 1 or position > min(len(value), SPLIT_WIDTHS[source]):
            return None
        return value[position - 1]
