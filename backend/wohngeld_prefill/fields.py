"""Field descriptors, classification results and fill summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

FieldValue = Union[bool, str]


class FieldType(str, Enum):
    TEXT = "text"
    CHECKBOX = "checkbox"
    DATE = "date"
    MULTILINE = "multiline"


class FieldCategory(str, Enum):
    AUTHORITY = "AUTHORITY"
    APPLICATION_META = "APPLICATION_META"
    PERSON = "PERSON"
    ADDRESS = "ADDRESS"
    HOUSING = "HOUSING"
    RENT = "RENT"
    INCOME = "INCOME"
    EMPLOYMENT_STATUS = "EMPLOYMENT_STATUS"
    BANK = "BANK"
    YES_NO = "YES_NO"
    OTHER = "OTHER"


@dataclass(frozen=True)
class FieldDescriptor:
    """Snapshot of one form field as found in the template."""

    name: str
    declared_type: FieldType
    is_checkbox: bool
    current_value: Optional[str] = None


@dataclass(frozen=True)
class ClassifiedField:
    descriptor: FieldDescriptor
    category: FieldCategory
    section_number: int = 0  # 0 = unknown
    person_index: int = 0  # 0 = unassigned, 1 = applicant, >= 2 = other household members

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def is_checkbox(self) -> bool:
        return self.descriptor.is_checkbox

    @property
    def declared_type(self) -> FieldType:
        return self.descriptor.declared_type

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "type": self.declared_type.value,
            "isCheckbox": self.is_checkbox,
            "category": self.category.value,
            "sectionNumber": self.section_number,
            "personIndex": self.person_index,
        }


@dataclass(frozen=True)
class FillSummary:
    fields_found: int
    fields_filled: int
    output_location: str
    filename: str

    def __post_init__(self) -> None:
        if not 0 <= self.fields_filled <= self.fields_found:
            raise ValueError(
                f"fields_filled ({self.fields_filled}) must be between 0 and fields_found ({self.fields_found})"
            )

    def to_dict(self) -> Dict:
        return {
            "outputPath": self.output_location,
            "filename": self.filename,
            "fieldsFound": self.fields_found,
            "fieldsFilled": self.fields_filled,
        }


@dataclass
class AnalysisResult:
    """Classification report of a template, used when onboarding a new form."""

    all_fields: List[ClassifiedField] = field(default_factory=list)
    by_category: Dict[FieldCategory, List[ClassifiedField]] = field(default_factory=dict)
    by_section: Dict[int, List[ClassifiedField]] = field(default_factory=dict)
    recommended_mapping: Dict[str, FieldValue] = field(default_factory=dict)

    @classmethod
    def from_fields(
        cls, fields: List[ClassifiedField], recommended_mapping: Dict[str, FieldValue]
    ) -> "AnalysisResult":
        result = cls(all_fields=list(fields), recommended_mapping=dict(recommended_mapping))
        for info in fields:
            result.by_category.setdefault(info.category, []).append(info)
            if info.section_number > 0:
                result.by_section.setdefault(info.section_number, []).append(info)
        return result

    @property
    def total_fields(self) -> int:
        return len(self.all_fields)

    def format_report(self) -> str:
        lines = ["=== PDF FELD-ANALYSE ===", "", f"Gesamt: {self.total_fields} Felder", ""]
        lines.append("--- Nach Kategorie ---")
        for category, fields in self.by_category.items():
            lines.append(f"{category.value}: {len(fields)} Felder")
            for info in fields:
                lines.append(f"  - {info.name} [{info.declared_type.value}]")
        lines.append("")
        lines.append("--- Empfohlenes Mapping ---")
        for name, value in self.recommended_mapping.items():
            if value == "":
                continue
            lines.append(f"{name} = {str(value).lower() if isinstance(value, bool) else value}")
        return "\n".join(lines) + "\n"

    def to_dict(self) -> Dict:
        return {
            "totalFields": self.total_fields,
            "fieldsByCategory": {
                category.value: [info.to_dict() for info in fields]
                for category, fields in self.by_category.items()
            },
            "fieldsBySection": {
                str(section): [info.name for info in fields] for section, fields in self.by_section.items()
            },
            "recommendedMapping": self.recommended_mapping,
            "report": self.format_report(),
        }
