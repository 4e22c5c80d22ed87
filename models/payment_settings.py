from datetime import datetime
from models.db import db


class PaymentSettings(db.Model):
    __tablename__ = "payment_settings"

    id = db.Column(db.Integer, primary_key=True)
    payments_enabled = db.Column(db.Boolean, default=True, nullable=False)
    disabled_reason = db.Column(db.String(255), nullable=False, default="")
    last_updated_by = db.Column(db.String(120), nullable=False, default="")
    last_updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    @classmethod
    def get_settings(cls) -> "PaymentSettings":
        """Return the settings row, creating the enabled default when missing."""
        settings = cls.query.order_by(cls.id.asc()).first()
        if settings is None:
            settings = cls(payments_enabled=True, disabled_reason="", last_updated_at=datetime.utcnow())
            db.session.add(settings)
            db.session.commit()
        return settings

    @classmethod
    def update_settings(cls, payments_enabled: bool, disabled_reason: str = "", updated_by: str = ""):
        settings = cls.get_settings()
        settings.payments_enabled = bool(payments_enabled)
        settings.disabled_reason = "" if payments_enabled else (disabled_reason or "")
        settings.last_updated_by = updated_by or ""
        settings.last_updated_at = datetime.utcnow()
        db.session.commit()
        return settings

    def to_dict(self):
        return {
            "payments_enabled": self.payments_enabled,
            "disabled_reason": self.disabled_reason,
            "last_updated_by": self.last_updated_by,
            "last_updated_at": self.last_updated_at.isoformat() if self.last_updated_at else None,
        }
