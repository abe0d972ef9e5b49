"""
Binding engine.

A `Binder` turns an application into a field name -> value table. The engine
applies such a table to a form, tolerating encoding drift between the table's
keys and the form's field names, and writes the result atomically.
"""

from __future__ import annotations

import abc
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .exceptions import FormWriteError
from .fields import FieldDescriptor, FieldValue, FillSummary
from .models import HousingBenefitApplication
from .normalizer import normalize
from .pdf_utils import FillableForm
from .template_scanner import TemplateScanner

logger = logging.getLogger(__name__)

FieldTable = Dict[str, FieldValue]


class Binder(abc.ABC):
    """Strategy computing field values for an application."""

    name = "binder"

    @abc.abstractmethod
    def bind(self, application: HousingBenefitApplication, descriptors: List[FieldDescriptor]) -> FieldTable:
        ...


def lookup(table: Mapping[str, FieldValue], name: str, index: Optional[Dict[str, str]] = None) -> Optional[FieldValue]:
    """Value for `name`: exact key first, then the first key with the same normalized form."""
    if name in table:
        return table[name]
    if index is None:
        index = normalized_index(table)
    key = index.get(normalize(name))
    return None if key is None else table[key]


def normalized_index(table: Mapping[str, FieldValue]) -> Dict[str, str]:
    index: Dict[str, str] = {}
    for key in table:
        index.setdefault(normalize(key), key)
    return index


def write_atomically(data: bytes, destination: Path) -> Path:
    """Write `data` next to `destination` and rename it into place."""
    destination = Path(destination)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        handle = tempfile.NamedTemporaryFile(
            dir=destination.parent, prefix=f".{destination.stem}.", suffix=".part", delete=False
        )
    except OSError as exc:
        raise FormWriteError(f"Cannot create output file in {destination.parent}: {exc}") from exc

    try:
        with handle:
            handle.write(data)
        os.replace(handle.name, destination)
    except OSError as exc:
        Path(handle.name).unlink(missing_ok=True)
        raise FormWriteError(f"Cannot write {destination}: {exc}") from exc
    return destination


class BindingEngine:
    def __init__(self, binder: Binder, scanner: Optional[TemplateScanner] = None):
        self.binder = binder
        self.scanner = scanner or TemplateScanner()

    def bindings(self, application: HousingBenefitApplication, form: FillableForm) -> FieldTable:
        """The table `fill` would apply to `form`."""
        return self.binder.bind(application, self.scanner.extract(form))

    def fill(self, application: HousingBenefitApplication, form: FillableForm, destination: Path) -> FillSummary:
        descriptors = self.scanner.extract(form)
        table = self.binder.bind(application, descriptors)
        logger.info("%s produced %d bindings", self.binder.name, len(table))
        return self._apply(table, form, descriptors, destination)

    def fill_with_direct_table(
        self, table: Mapping[str, FieldValue], form: FillableForm, destination: Path
    ) -> FillSummary:
        return self._apply(table, form, self.scanner.extract(form), destination)

    def _apply(
        self,
        table: Mapping[str, FieldValue],
        form: FillableForm,
        descriptors: List[FieldDescriptor],
        destination: Path,
    ) -> FillSummary:
        index = normalized_index(table)
        filled = 0
        for descriptor in descriptors:
            value = lookup(table, descriptor.name, index)
            if value is None or value == "":
                continue
            try:
                if self._write(form, descriptor, value):
                    filled += 1
                    logger.debug("Filled field '%s' = '%s'", descriptor.name, value)
            except Exception as exc:
                logger.warning("Error filling field '%s': %s", descriptor.name, exc)

        try:
            data = form.to_bytes()
        except FormWriteError:
            raise
        except Exception as exc:
            raise FormWriteError(f"Cannot serialize filled form: {exc}") from exc
        location = write_atomically(data, destination)

        summary = FillSummary(
            fields_found=len(descriptors),
            fields_filled=filled,
            output_location=str(location),
            filename=location.name,
        )
        logger.info("PDF created: %s (fields: %d, filled: %d)", location.name, len(descriptors), filled)
        return summary

    @staticmethod
    def _write(form: FillableForm, descriptor: FieldDescriptor, value: FieldValue) -> bool:
        if descriptor.is_checkbox:
            if value is True or (isinstance(value, str) and value.lower() == "true"):
                form.check(descriptor.name)
                return True
            return False
        if isinstance(value, bool):
            return False
        form.set_text(descriptor.name, str(value))
        return True
