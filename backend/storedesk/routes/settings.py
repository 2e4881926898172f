# Overview: Flask API routes for the company profile; parses input and returns JSON responses.

from flask import Blueprint, request

from ..models import CompanySettings
from ..validation import ModelValidationPolicy, validate_payload, ValidationError
from ..services.settings_service import get_company_settings, update_company_settings

COMPANY_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "address_line1", "address_line2", "city", "state", "postal_code", "country",
        "phone", "email", "website", "tax_id", "logo_url",
    },
)

settings_bp = Blueprint("settings", __name__, url_prefix="/api/company")


@settings_bp.get("")
def get_company():
    return get_company_settings()


@settings_bp.put("")
def update_company():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=CompanySettings, payload=payload, policy=COMPANY_POLICY, partial=True)
        return update_company_settings(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
