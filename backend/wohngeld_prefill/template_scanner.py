"""
PDF Template Scanner

Extracts the fillable fields of an AcroForm template as field descriptors.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List

from .fields import FieldDescriptor, FieldType
from .pdf_utils import FillableForm, FormField, PdfForm

logger = logging.getLogger(__name__)

_DATE_NAME = re.compile(r"datum|date", re.IGNORECASE)


def descriptor_for(field: FormField) -> FieldDescriptor:
    """Derive the declared type of a fillable field."""
    if field.field_type == "/Btn":
        return FieldDescriptor(field.name, FieldType.CHECKBOX, True, field.value)
    if field.field_type == "/Tx" and field.is_multiline:
        declared = FieldType.MULTILINE
    elif _DATE_NAME.search(field.name):
        declared = FieldType.DATE
    else:
        declared = FieldType.TEXT
    return FieldDescriptor(field.name, declared, False, field.value)


def is_fillable(field: FormField) -> bool:
    return not (field.is_pushbutton or field.is_radio or field.field_type == "/Sig")


class TemplateScanner:
    """Scans PDF templates for form fields"""

    def extract(self, form: FillableForm) -> List[FieldDescriptor]:
        """
        One descriptor per fillable leaf field, in traversal order.

        Raises FormReadError when the form has no field catalogue.
        """
        descriptors = []
        for field in form.iter_fields():
            if not is_fillable(field):
                logger.debug("Skipping non-fillable field %s (%s)", field.name, field.field_type)
                continue
            descriptors.append(descriptor_for(field))
        if not descriptors:
            logger.warning("Form %s has no fillable fields", getattr(form, "source", "<form>"))
        return descriptors

    def scan_template(self, pdf_file: Path, font_size: int = 0) -> Dict:
        """
        Scan a single PDF template.

        Returns: {
            "template_file": "filename.pdf",
            "form_fields": ["field1", "field2", ...],
            "field_types": {"field1": "text", ...},
            "has_fields": bool,
            "field_count": int,
            "checkbox_count": int
        }
        """
        pdf_file = Path(pdf_file)
        descriptors = self.extract(PdfForm.open(pdf_file, font_size=font_size))
        logger.info("Scanned %s: %d fields", pdf_file.name, len(descriptors))
        return {
            "template_file": pdf_file.name,
            "form_fields": [d.name for d in descriptors],
            "field_types": {d.name: d.declared_type.value for d in descriptors},
            "has_fields": bool(descriptors),
            "field_count": len(descriptors),
            "checkbox_count": sum(1 for d in descriptors if d.is_checkbox),
        }
