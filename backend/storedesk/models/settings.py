from __future__ import annotations

from ..extensions import db
from storedesk.time_utils import to_utc_z


COMPANY_SETTINGS_ID = "default"


class CompanySettings(db.Model):
    """
    Profile of the invoice-issuing company.

    Singleton: the only row has id == COMPANY_SETTINGS_ID, so a second
    profile cannot be inserted by accident.
    """
    __tablename__ = "company_settings"
    __table_args__ = (
        db.CheckConstraint(f"id = '{COMPANY_SETTINGS_ID}'", name="ck_company_settings_singleton"),
    )

    id = db.Column(db.String(36), primary_key=True, default=COMPANY_SETTINGS_ID)
    name = db.Column(db.String(255), nullable=False)
    address_line1 = db.Column(db.String(255), nullable=True)
    address_line2 = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(128), nullable=True)
    state = db.Column(db.String(128), nullable=True)
    postal_code = db.Column(db.String(32), nullable=True)
    country = db.Column(db.String(128), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    website = db.Column(db.String(255), nullable=True)
    tax_id = db.Column(db.String(64), nullable=True)
    logo_url = db.Column(db.String(1024), nullable=True)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "address_line1": self.address_line1,
            "address_line2": self.address_line2,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
            "phone": self.phone,
            "email": self.email,
            "website": self.website,
            "tax_id": self.tax_id,
            "logo_url": self.logo_url,
            "updated_at": to_utc_z(self.updated_at),
        }
