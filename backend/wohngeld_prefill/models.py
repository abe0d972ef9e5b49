"""
Domain model of a Wohngeld (housing benefit) application.

The models are the only input of the binding engine. Free-form status values
(gender, marital status, employment status, tenancy) are kept as strings and
accepted in German or English; the resolver compares them through the name
normalizer.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import MalformedValueError, ValidationError
from .formatting import parse_amount


def _amount(value: Any) -> Any:
    """Accept German formatted amount strings ("1.234,56")."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            return float(parse_amount(value))
        except MalformedValueError:
            return value  # let pydantic report the type error
    if isinstance(value, Decimal):
        return float(value)
    return value


class ApplicationMeta(BaseModel):
    application_date: Optional[str] = Field(default_factory=lambda: date.today().strftime("%d.%m.%Y"))
    benefit_start: Optional[str] = None
    first_application: bool = True
    housing_benefit_number: Optional[str] = None  # only for continuation applications
    informal_application_date: Optional[str] = None
    authority_name: Optional[str] = None
    authority_street: Optional[str] = None
    authority_zip: Optional[str] = None
    authority_city: Optional[str] = None


class Applicant(BaseModel):
    salutation: Optional[str] = None
    gender: Optional[str] = None  # maennlich, weiblich, divers, keine angabe
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    birth_date: str = Field(..., min_length=1)
    birth_place: Optional[str] = None
    birth_name: Optional[str] = None
    nationality: Optional[str] = "deutsch"
    marital_status: Optional[str] = "ledig"
    employment_status: Optional[str] = "erwerbstaetig"
    phone: Optional[str] = None
    email: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Address(BaseModel):
    street: str = Field(..., min_length=1)
    house_number: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: Optional[str] = None

    @property
    def full_address(self) -> str:
        return f"{self.street} {self.house_number}, {self.zip_code} {self.city}"


class Housing(BaseModel):
    move_in_date: Optional[str] = None
    living_area_sqm: Optional[float] = None
    rooms: Optional[int] = None
    heating_type: Optional[str] = None
    construction_year: Optional[str] = None
    landlord_name: Optional[str] = None
    landlord_address: Optional[str] = None
    tenancy: Optional[str] = "hauptmieter"  # hauptmieter, untermieter, heimbewohner, eigentum
    related_to_landlord: bool = False
    rent_controlled: bool = False
    business_use: bool = False
    sublet: bool = False
    sublet_paid: bool = False

    @field_validator("living_area_sqm", mode="before")
    @classmethod
    def parse_area(cls, value: Any) -> Any:
        return _amount(value)


class Rent(BaseModel):
    cold_rent: Optional[float] = Field(default=None, ge=0)
    service_charges: Optional[float] = Field(default=0.0, ge=0)
    heating_costs: Optional[float] = Field(default=0.0, ge=0)
    heating_included: bool = False
    hot_water_costs: Optional[float] = Field(default=0.0, ge=0)
    hot_water_included: bool = False
    garage_costs: Optional[float] = Field(default=0.0, ge=0)
    service_fees: Optional[float] = Field(default=0.0, ge=0)
    household_energy_costs: Optional[float] = Field(default=0.0, ge=0)
    total_rent: Optional[float] = Field(default=None, ge=0)
    expected_change: Optional[str] = None  # nein, erhoehen, verringern
    third_party_payment: bool = False
    other_person_payment: bool = False

    @field_validator(
        "cold_rent",
        "service_charges",
        "heating_costs",
        "hot_water_costs",
        "garage_costs",
        "service_fees",
        "household_energy_costs",
        "total_rent",
        mode="before",
    )
    @classmethod
    def parse_amounts(cls, value: Any) -> Any:
        return _amount(value)

    @property
    def total(self) -> Optional[float]:
        if self.total_rent is not None:
            return self.total_rent
        if self.cold_rent is None:
            return None
        return (
            self.cold_rent
            + (self.service_charges or 0.0)
            + (self.heating_costs or 0.0)
            + (self.hot_water_costs or 0.0)
        )


class IncomeEntry(BaseModel):
    kind: Optional[str] = None  # "Erwerbsminderungsrente", "Gehalt", ...
    gross_amount: Optional[float] = None
    frequency: Optional[str] = "monatlich"

    @field_validator("gross_amount", mode="before")
    @classmethod
    def parse_gross_amount(cls, value: Any) -> Any:
        return _amount(value)


class Income(BaseModel):
    entries: List[IncomeEntry] = Field(default_factory=list)
    gross_monthly: Optional[float] = Field(default=None, ge=0)
    net_monthly: Optional[float] = Field(default=None, ge=0)
    other_income: Optional[float] = Field(default=0.0, ge=0)
    child_benefit: Optional[float] = Field(default=0.0, ge=0)
    maintenance: Optional[float] = Field(default=0.0, ge=0)
    pays_taxes: bool = False
    pays_pension_insurance: bool = False
    pays_health_insurance: bool = True

    @field_validator(
        "gross_monthly", "net_monthly", "other_income", "child_benefit", "maintenance", mode="before"
    )
    @classmethod
    def parse_amounts(cls, value: Any) -> Any:
        return _amount(value)


class HouseholdMember(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    birth_date: Optional[str] = None
    relationship: Optional[str] = None
    monthly_income: Optional[float] = 0.0


class Household(BaseModel):
    size: int = Field(default=1, ge=1)
    members: List[HouseholdMember] = Field(default_factory=list)


class BankDetails(BaseModel):
    iban: str = Field(..., min_length=1)
    bic: Optional[str] = None
    bank_name: Optional[str] = None
    account_holder: Optional[str] = None


class SupplementalFlags(BaseModel):
    """Answers to the yes/no questions of the form."""

    other_dwelling_benefit: bool = False
    secondary_residence: bool = False
    third_party_pays_costs: bool = False
    additional_household_persons: bool = False
    household_member_deceased: bool = False
    household_size_change: bool = False
    transfer_benefits: bool = False
    transfer_benefit_kind: Optional[str] = None
    transfer_benefit_date: Optional[str] = None
    asked_to_apply: bool = False
    work_expenses: bool = False
    childcare_costs: bool = False
    disability_or_care: bool = False
    care_level: Optional[str] = None
    disability_degree: Optional[str] = None
    maintenance_payments: bool = False
    unenforced_maintenance: bool = False
    one_time_income: bool = False
    income_change: bool = False
    income_change_direction: Optional[str] = None  # erhoehen, verringern
    assets_above_threshold: bool = False
    statement_consent: bool = True


class HousingBenefitApplication(BaseModel):
    applicant: Applicant
    address: Address
    housing: Optional[Housing] = None
    rent: Rent
    household: Optional[Household] = None
    income: Income
    bank: BankDetails
    application: ApplicationMeta = Field(default_factory=ApplicationMeta)
    supplemental: SupplementalFlags = Field(default_factory=SupplementalFlags)


def parse_application(payload: Dict[str, Any]) -> HousingBenefitApplication:
    """Validate raw request data, raising the package's ValidationError."""
    try:
        return HousingBenefitApplication.model_validate(payload)
    except PydanticValidationError as exc:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        summary = ", ".join(f"{e['field']}: {e['message']}" for e in errors)
        raise ValidationError(f"Invalid application data: {summary}", errors=errors) from exc
