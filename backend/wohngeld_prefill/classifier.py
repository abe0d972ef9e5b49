"""
Field classification by name.

`FieldClassifier.classify` derives, in this order, a section number, the
owning person and a semantic category from a field name alone. It is a pure
function of the descriptor.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from .fields import ClassifiedField, FieldCategory, FieldDescriptor
from .keywords import CATEGORY_TABLE, match_category
from .normalizer import fold, normalize

logger = logging.getLogger(__name__)

MAX_SECTION = 20
MAX_PERSON = 10

_SECTION = re.compile(r"(?:abschnitt|section)\s*(\d+)")
_SECTION_LETTER = re.compile(r"^([a-e])[._\s]")

_PERSON_PATTERNS = (
    re.compile(r"person\s*(\d+)"),
    re.compile(r"hhm\s*(\d+)"),
    re.compile(r"[._](\d{1,2})$"),
)
_APPLICANT = re.compile(r"antragsteller|applicant")
# "Lebenspartner" is a marital status option, not the spouse's column
_SPOUSE = re.compile(r"ehegatt|ehepartner|spouse|(?<!lebens)partner")


def section_number(name: str) -> int:
    folded = fold(name)
    match = _SECTION.search(folded)
    if match and 1 <= int(match.group(1)) <= MAX_SECTION:
        return int(match.group(1))
    match = _SECTION_LETTER.match(folded)
    if match:
        return ord(match.group(1)) - ord("a") + 1
    return 0


def person_index(name: str) -> int:
    folded = fold(name)
    for pattern in _PERSON_PATTERNS:
        match = pattern.search(folded)
        if match and 1 <= int(match.group(1)) <= MAX_PERSON:
            return int(match.group(1))
    key = normalize(name)
    if _APPLICANT.search(key):
        return 1
    if _SPOUSE.search(key):
        return 2
    return 0


def category_of(name: str) -> FieldCategory:
    return match_category(normalize(name), CATEGORY_TABLE) or FieldCategory.OTHER


class FieldClassifier:
    """Assigns category, section and person index to form fields."""

    def classify(self, descriptor: FieldDescriptor) -> ClassifiedField:
        classified = ClassifiedField(
            descriptor=descriptor,
            category=category_of(descriptor.name),
            section_number=section_number(descriptor.name),
            person_index=person_index(descriptor.name),
        )
        logger.debug(
            "Classified %s as %s (section %s, person %s)",
            descriptor.name,
            classified.category.value,
            classified.section_number,
            classified.person_index,
        )
        return classified

    def classify_all(self, descriptors, category: Optional[FieldCategory] = None):
        classified = [self.classify(d) for d in descriptors]
        if category is not None:
            classified = [c for c in classified if c.category == category]
        return classified
