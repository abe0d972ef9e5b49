"""
Automatic Field Mapping Engine

Maps an application onto an unknown template by classifying every field name
and resolving a value per field. Used as the fallback strategy and to produce
the onboarding report for new templates.
"""

import logging
from typing import Dict, List, Optional

from .binding import Binder, FieldTable
from .classifier import FieldClassifier
from .fields import AnalysisResult, ClassifiedField, FieldDescriptor
from .models import HousingBenefitApplication
from .resolver import ValueResolver

logger = logging.getLogger(__name__)


class ClassificationBinder(Binder):
    """Automatically maps application data to PDF form fields"""

    name = "classification"

    def __init__(self, classifier: Optional[FieldClassifier] = None, resolver: Optional[ValueResolver] = None):
        self.classifier = classifier or FieldClassifier()
        self.resolver = resolver or ValueResolver()

    def bind(self, application: HousingBenefitApplication, descriptors: List[FieldDescriptor]) -> FieldTable:
        return self._mapping(application, [self.classifier.classify(d) for d in descriptors])

    def _mapping(self, application: HousingBenefitApplication, fields: List[ClassifiedField]) -> FieldTable:
        mapping: Dict = {}
        skipped_persons = 0
        for info in fields:
            if info.person_index > 1:
                skipped_persons += 1
                continue
            value = self.resolver.resolve(info, application)
            if value is not None:
                mapping[info.name] = value
        if skipped_persons:
            logger.debug("Left %d fields of other household members for manual completion", skipped_persons)
        self._log_dropped_entries(application)
        logger.info("Resolved %d of %d fields by classification", len(mapping), len(fields))
        return mapping

    def _log_dropped_entries(self, application: HousingBenefitApplication) -> None:
        count = len(application.income.entries)
        if count > self.resolver.max_income_entries:
            logger.warning(
                "Form supports %d income entries, dropping %d",
                self.resolver.max_income_entries,
                count - self.resolver.max_income_entries,
            )

    def analyze(self, application: HousingBenefitApplication, descriptors: List[FieldDescriptor]) -> AnalysisResult:
        """Classification report with the recommended field -> value mapping."""
        fields = [self.classifier.classify(d) for d in descriptors]
        result = AnalysisResult.from_fields(fields, self._mapping(application, fields))
        logger.info(
            "Analyzed %d fields in %d categories", result.total_fields, len(result.by_category)
        )
        return result
