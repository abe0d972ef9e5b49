"""
Wohngeld (housing benefit) PDF pre-fill package.

This package bundles:
  - field inventory, name normalization and classification of AcroForm templates
  - value resolution from a housing benefit application
  - direct-table and classification binding strategies plus the binding engine
  - the service used by the FastAPI backend
"""

from .binding import Binder, BindingEngine
from .exceptions import FormReadError, FormWriteError, MalformedValueError, PrefillError, ValidationError
from .models import HousingBenefitApplication, parse_application
from .service import WohngeldPrefillService

__all__ = [
    "Binder",
    "BindingEngine",
    "FormReadError",
    "FormWriteError",
    "HousingBenefitApplication",
    "MalformedValueError",
    "PrefillError",
    "ValidationError",
    "WohngeldPrefillService",
    "parse_application",
]
