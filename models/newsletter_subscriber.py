import secrets
from datetime import datetime
from models.db import db


def new_unsubscribe_token() -> str:
    return secrets.token_hex(32)


class NewsletterSubscriber(db.Model):
    __tablename__ = "newsletter_subscribers"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    # sent in every email's unsubscribe link
    unsubscribe_token = db.Column(db.String(64), unique=True, nullable=False, default=new_unsubscribe_token)

    subscribed_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    unsubscribed_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "is_active": self.is_active,
            "subscribed_at": self.subscribed_at.isoformat() if self.subscribed_at else None,
            "unsubscribed_at": self.unsubscribed_at.isoformat() if self.unsubscribed_at else None,
        }
