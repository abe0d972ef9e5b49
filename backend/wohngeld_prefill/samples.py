"""Sample application: retired applicant with a reduced earning capacity pension."""

from .models import (
    Address,
    Applicant,
    ApplicationMeta,
    BankDetails,
    Housing,
    HousingBenefitApplication,
    Income,
    IncomeEntry,
    Rent,
    SupplementalFlags,
)


def sample_application() -> HousingBenefitApplication:
    return HousingBenefitApplication(
        application=ApplicationMeta(
            first_application=True,
            application_date="21.12.2025",
            informal_application_date="07.01.2025",
        ),
        applicant=Applicant(
            last_name="Beispiel",
            first_name="Maria",
            birth_date="23.05.1962",
            nationality="deutsch",
            gender="weiblich",
            marital_status="geschieden",
            employment_status="rentner",
        ),
        address=Address(
            street="Heilig-Geist-Str.",
            house_number="3",
            zip_code="14467",
            city="Potsdam",
            state="Brandenburg",
        ),
        housing=Housing(
            living_area_sqm=45.0,
            tenancy="hauptmieter",
            related_to_landlord=False,
            rent_controlled=False,
        ),
        rent=Rent(
            total_rent=463.25,
            heating_included=False,
            heating_costs=61.50,
            hot_water_included=False,
            hot_water_costs=0.0,
            expected_change="nein",
        ),
        income=Income(
            entries=[
                IncomeEntry(kind="Erwerbsminderungsrente", gross_amount=855.42, frequency="monatlich"),
                IncomeEntry(kind="Zuschlag zur Rente", gross_amount=38.49, frequency="monatlich"),
            ],
            pays_health_insurance=True,
            pays_pension_insurance=False,
            pays_taxes=False,
        ),
        bank=BankDetails(
            iban="DE89 3704 0044 0532 0130 00",
            bank_name="Sparkasse Potsdam",
            account_holder="Maria Beispiel",
        ),
        supplemental=SupplementalFlags(
            transfer_benefits=True,
            transfer_benefit_kind="GRUNDSICHERUNG",
            transfer_benefit_date="07.01.2025",
            disability_or_care=True,
            care_level="PG 2",
        ),
    )
