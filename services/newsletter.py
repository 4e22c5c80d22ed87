"""Newsletter subscription list. Sending campaigns is handled elsewhere."""
import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from models import db
from models.newsletter_subscriber import NewsletterSubscriber
from utils.emailer import send_newsletter_welcome
from utils.errors import ConflictError, NotFoundError, ValidationError
from utils.validation import clean_text, is_valid_email

logger = logging.getLogger(__name__)


def _clean_email(value) -> str:
    email = clean_text(value).lower()
    if not email:
        raise ValidationError("Email is required", field="email")
    if not is_valid_email(email):
        raise ValidationError("Please enter a valid email address", field="email")
    return email


def subscribe(email) -> tuple:
    """Return (subscriber, message). Inactive subscribers are reactivated."""
    email = _clean_email(email)
    subscriber = NewsletterSubscriber.query.filter_by(email=email).first()

    if subscriber is not None:
        if subscriber.is_active:
            raise ConflictError("This email is already subscribed to our newsletter")
        subscriber.is_active = True
        subscriber.subscribed_at = datetime.utcnow()
        subscriber.unsubscribed_at = None
        db.session.commit()
        send_newsletter_welcome(subscriber)
        return subscriber, "Welcome back! You have been re-subscribed to our newsletter."

    subscriber = NewsletterSubscriber(email=email)
    db.session.add(subscriber)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("This email is already subscribed to our newsletter")

    send_newsletter_welcome(subscriber)
    return subscriber, "Thank you for subscribing! Check your email for confirmation."


def is_subscribed(email) -> bool:
    email = _clean_email(email)
    return NewsletterSubscriber.query.filter_by(email=email, is_active=True).first() is not None


def unsubscribe(token) -> tuple:
    """Return (subscriber, already_unsubscribed)."""
    token = clean_text(token)
    if not token:
        raise ValidationError("Invalid unsubscribe link. Please check your email and try again.", field="token")
    subscriber = NewsletterSubscriber.query.filter_by(unsubscribe_token=token).first()
    if subscriber is None:
        raise NotFoundError("Invalid or expired unsubscribe link.")
    if not subscriber.is_active:
        return subscriber, True

    subscriber.is_active = False
    subscriber.unsubscribed_at = datetime.utcnow()
    db.session.commit()
    logger.info("Newsletter subscriber %s unsubscribed", subscriber.id)
    return subscriber, False


def list_subscribers(active_only: bool = False, page=1, limit=50) -> dict:
    try:
        page = max(int(page or 1), 1)
        limit = min(max(int(limit or 50), 1), 200)
    except (TypeError, ValueError):
        raise ValidationError("page and limit must be integers", field="page")

    q = NewsletterSubscriber.query
    if active_only:
        q = q.filter_by(is_active=True)
    total = q.count()
    rows = q.order_by(NewsletterSubscriber.subscribed_at.desc()).offset((page - 1) * limit).limit(limit).all()

    everyone = NewsletterSubscriber.query.count()
    active = NewsletterSubscriber.query.filter_by(is_active=True).count()
    return {
        "subscribers": [s.to_dict() for s in rows],
        "pagination": {"total": total, "page": page, "limit": limit, "pages": -(-total // limit)},
        "stats": {"total": everyone, "active": active, "inactive": everyone - active},
    }
