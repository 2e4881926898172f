# Overview: Pytest coverage for the company profile singleton.

import pytest

from storedesk.models import CompanySettings
from storedesk.services import settings_service
from storedesk.validation import ValidationError


class TestCompanySettings:
    """At most one profile row; created on first read."""

    def test_get_creates_default(self, db_session):
        settings = settings_service.get_company_settings()
        assert settings["name"] == settings_service.DEFAULT_COMPANY_NAME
        assert db_session.query(CompanySettings).count() == 1

        settings_service.get_company_settings()
        assert db_session.query(CompanySettings).count() == 1

    def test_update(self, db_session):
        updated = settings_service.update_company_settings({
            "name": "Acme Traders",
            "city": "Springfield",
            "tax_id": "TAX-1",
        })
        assert updated["name"] == "Acme Traders"
        assert updated["city"] == "Springfield"
        assert settings_service.get_company_settings()["tax_id"] == "TAX-1"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name_rejected(self, db_session, name):
        with pytest.raises(ValidationError):
            settings_service.update_company_settings({"name": name})

    def test_unknown_fields_ignored(self, db_session):
        updated = settings_service.update_company_settings({"id": "other", "city": "Paris"})
        assert updated["city"] == "Paris"
        assert db_session.query(CompanySettings).one().id == "default"
