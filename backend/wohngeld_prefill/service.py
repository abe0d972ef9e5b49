"""
High-level service that exposes Wohngeld pre-fill capabilities to the FastAPI layer.

Responsibilities
----------------
* locate the form template (caller path, configured path or bundled default)
* list and analyze template fields
* fill the template from an application, by direct table or by classification
* store generated PDFs locally and optionally in S3
"""

from __future__ import annotations

import datetime as dt
import logging
import re
import threading
from pathlib import Path
from typing import List, Mapping, Optional

import boto3
from cachetools import TTLCache

from .auto_mapper import ClassificationBinder
from .binding import BindingEngine, FieldTable
from .classifier import FieldClassifier
from .config import DEFAULT_TEMPLATE, Settings
from .direct_mapper import DirectTableBinder
from .exceptions import FormReadError, FormWriteError
from .fields import AnalysisResult, FillSummary
from .models import HousingBenefitApplication
from .pdf_utils import PdfForm
from .resolver import ValueResolver
from .samples import sample_application
from .template_scanner import TemplateScanner

logger = logging.getLogger(__name__)

STRATEGIES = ("direct", "classification")


class WohngeldPrefillService:
    def __init__(self, settings: Optional[Settings] = None, s3_client=None):
        self.settings = settings or Settings.from_env()
        self.output_dir = Path(self.settings.output_dir)

        self.scanner = TemplateScanner()
        self.classifier = FieldClassifier()
        self.resolver = ValueResolver(max_income_entries=self.settings.max_income_entries)
        self.direct_binder = DirectTableBinder(max_income_entries=self.settings.max_income_entries)
        self.classification_binder = ClassificationBinder(self.classifier, self.resolver)

        self._analysis_cache: TTLCache = TTLCache(maxsize=32, ttl=self.settings.analysis_cache_ttl)
        self._cache_lock = threading.Lock()

        self.s3_bucket = self.settings.s3_bucket
        self.s3_prefix = self.settings.s3_prefix
        self.s3 = s3_client
        if self.s3_bucket and self.s3 is None:
            self.s3 = boto3.client("s3")

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------
    def resolve_template_path(self, path: Optional[str] = None) -> Path:
        candidate = Path(path) if path else (self.settings.template_path or DEFAULT_TEMPLATE)
        if not candidate.is_file():
            raise FormReadError(f"PDF template not found: {candidate}")
        return candidate

    def open_form(self, path: Optional[str] = None) -> PdfForm:
        return self._load(self.resolve_template_path(path))

    def _load(self, template: Path) -> PdfForm:
        return PdfForm.open(template, font_size=self.settings.font_size)

    def list_fields(self, path: Optional[str] = None) -> List[str]:
        return [d.name for d in self.scanner.extract(self.open_form(path))]

    def analyze_template(
        self, path: Optional[str] = None, application: Optional[HousingBenefitApplication] = None
    ) -> AnalysisResult:
        template = self.resolve_template_path(path)
        if application is not None:
            return self._analyze(template, application)

        key = (str(template.resolve()), template.stat().st_mtime)
        with self._cache_lock:
            cached = self._analysis_cache.get(key)
        if cached is not None:
            logger.debug("Analysis cache hit for %s", template.name)
            return cached
        result = self._analyze(template, sample_application())
        with self._cache_lock:
            self._analysis_cache[key] = result
        return result

    def _analyze(self, template: Path, application: HousingBenefitApplication) -> AnalysisResult:
        form = self._load(template)
        return self.classification_binder.analyze(application, self.scanner.extract(form))

    # ------------------------------------------------------------------
    # Filling
    # ------------------------------------------------------------------
    def engine(self, strategy: str = "direct") -> BindingEngine:
        if strategy == "direct":
            return BindingEngine(self.direct_binder, self.scanner)
        if strategy == "classification":
            return BindingEngine(self.classification_binder, self.scanner)
        raise ValueError(f"Unknown strategy {strategy!r}, expected one of {', '.join(STRATEGIES)}")

    def fill_pdf(
        self, application: HousingBenefitApplication, path: Optional[str] = None, strategy: str = "direct"
    ) -> FillSummary:
        engine = self.engine(strategy)
        form = self.open_form(path)
        summary = engine.fill(application, form, self._output_path(application.applicant.last_name))
        return self._store(summary)

    def fill_pdf_with_table(
        self, table: Mapping[str, object], path: Optional[str] = None, name: Optional[str] = None
    ) -> FillSummary:
        form = self.open_form(path)
        summary = self.engine("direct").fill_with_direct_table(dict(table), form, self._output_path(name))
        return self._store(summary)

    def direct_table(self, application: HousingBenefitApplication) -> FieldTable:
        return self.direct_binder.build_table(application)

    # ------------------------------------------------------------------
    # Output files
    # ------------------------------------------------------------------
    def get_output_file(self, filename: str) -> Path:
        if not filename or Path(filename).name != filename or filename.startswith("."):
            raise FormReadError(f"Invalid file name: {filename!r}")
        target = self.output_dir / filename
        if not target.is_file():
            raise FormReadError(f"File not found: {filename}")
        return target

    def _output_path(self, name: Optional[str] = None) -> Path:
        timestamp = dt.datetime.now().strftime("%Y%m%d_%H%M%S")
        safe_name = re.sub(r"[^\w-]+", "_", name or "").strip("_")
        stem = f"wohngeldantrag_{safe_name}_{timestamp}" if safe_name else f"wohngeldantrag_{timestamp}"
        return self.output_dir / f"{stem}.pdf"

    def _store(self, summary: FillSummary) -> FillSummary:
        if not self.s3_bucket:
            return summary
        key = f"{self.s3_prefix}{summary.filename}"
        try:
            pdf_bytes = Path(summary.output_location).read_bytes()
            self.s3.put_object(Bucket=self.s3_bucket, Key=key, Body=pdf_bytes, ContentType="application/pdf")
        except Exception as exc:
            raise FormWriteError(f"Upload to s3://{self.s3_bucket}/{key} failed: {exc}") from exc
        logger.info("Uploaded %s to s3://%s/%s", summary.filename, self.s3_bucket, key)
        return FillSummary(
            fields_found=summary.fields_found,
            fields_filled=summary.fields_filled,
            output_location=f"s3://{self.s3_bucket}/{key}",
            filename=summary.filename,
        )
