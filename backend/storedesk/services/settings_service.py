# Overview: Company profile singleton used on invoices.

from __future__ import annotations

from ..extensions import db
from ..models import CompanySettings
from ..models.settings import COMPANY_SETTINGS_ID
from ..validation import ValidationError

DEFAULT_COMPANY_NAME = "My Company"

COMPANY_MUTABLE_FIELDS = {
    "name", "address_line1", "address_line2", "city", "state", "postal_code", "country",
    "phone", "email", "website", "tax_id", "logo_url",
}


def load_company_settings() -> CompanySettings:
    """Return the singleton row, creating it with defaults on first use."""
    settings = db.session.get(CompanySettings, COMPANY_SETTINGS_ID)
    if settings is None:
        settings = CompanySettings(id=COMPANY_SETTINGS_ID, name=DEFAULT_COMPANY_NAME)
        db.session.add(settings)
        db.session.commit()
    return settings


def get_company_settings() -> dict:
    return load_company_settings().to_dict()


def update_company_settings(patch: dict) -> dict:
    if "name" in patch and not (patch["name"] or "").strip():
        raise ValidationError("Company name cannot be blank")

    settings = load_company_settings()
    for k, v in patch.items():
        if k in COMPANY_MUTABLE_FIELDS:
            setattr(settings, k, v)
    db.session.commit()
    return settings.to_dict()
