"""
Customer reviews. New reviews wait as PENDING until staff approve them;
only approved reviews are listed publicly, with masked names.
"""
import logging
from datetime import datetime
from typing import Optional

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from models import db
from models.enums import ReviewStatus
from models.review import Review
from utils.clock import local_today, to_utc_naive
from utils.errors import NotFoundError, RateLimitError, ValidationError
from utils.validation import clean_text, is_valid_email, is_valid_mobile, normalize_mobile

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "You have already submitted a review for this booking"


def _page_args(page, limit, default_limit):
    try:
        page = max(int(page or 1), 1)
        limit = min(max(int(limit or default_limit), 1), 100)
    except (TypeError, ValueError):
        raise ValidationError("page and limit must be integers", field="page")
    return page, limit


def _validate(data: dict) -> dict:
    name = clean_text(data.get("user_name"))
    phone = data.get("user_phone")
    text = clean_text(data.get("review_text"))
    rating = data.get("rating")

    if not name or not isinstance(phone, str) or not phone.strip() or not text or rating is None:
        raise ValidationError("Missing required fields")
    if len(name) > 100:
        raise ValidationError("Name cannot exceed 100 characters", field="user_name")
    # bool is an int subclass
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be an integer between 1 and 5", field="rating")
    if not 10 <= len(text) <= 500:
        raise ValidationError("Review must be between 10 and 500 characters", field="review_text")
    if not is_valid_mobile(phone):
        raise ValidationError("Invalid phone number", field="user_phone")

    email = clean_text(data.get("user_email")).lower() or None
    if email and not is_valid_email(email):
        raise ValidationError("Please enter a valid email address", field="user_email")

    return {
        "user_name": name,
        "user_phone": normalize_mobile(phone),
        "user_email": email,
        "booking_ref": clean_text(data.get("booking_ref")).upper() or None,
        "rating": rating,
        "review_text": text,
    }


def submit_review(data: dict) -> Review:
    fields = _validate(data)

    # the daily cap counts from local midnight
    day_start = to_utc_naive(datetime.combine(local_today(), datetime.min.time()))
    per_day = current_app.config.get("REVIEWS_PER_PHONE_PER_DAY", 3)
    today_count = Review.query.filter(
        Review.user_phone == fields["user_phone"],
        Review.created_at >= day_start,
    ).count()
    if today_count >= per_day:
        raise RateLimitError(f"You can only submit {per_day} reviews per day. Please try again tomorrow.")

    if fields["booking_ref"] and Review.query.filter_by(
        user_phone=fields["user_phone"], booking_ref=fields["booking_ref"]
    ).first():
        raise ValidationError(DUPLICATE_MESSAGE, field="booking_ref")

    review = Review(status=ReviewStatus.PENDING.value, **fields)
    db.session.add(review)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError(DUPLICATE_MESSAGE, field="booking_ref")
    return review


def list_approved(page=1, limit=10) -> dict:
    page, limit = _page_args(page, limit, 10)
    q = Review.query.filter_by(status=ReviewStatus.APPROVED.value)
    total = q.count()
    rows = (
        q.order_by(Review.approved_at.desc(), Review.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    avg = (
        db.session.query(func.avg(Review.rating))
        .filter(Review.status == ReviewStatus.APPROVED.value)
        .scalar()
    )
    return {
        "reviews": [r.to_public_dict() for r in rows],
        "pagination": {"total": total, "page": page, "limit": limit, "pages": -(-total // limit)},
        "stats": {"average_rating": round(float(avg or 0), 1), "total_reviews": total},
    }


def list_for_admin(status: Optional[str] = None, page=1, limit=50) -> dict:
    page, limit = _page_args(page, limit, 50)
    q = Review.query
    if status:
        if status not in {s.value for s in ReviewStatus}:
            raise ValidationError("Invalid status", field="status")
        q = q.filter_by(status=status)
    total = q.count()
    rows = q.order_by(Review.created_at.desc()).offset((page - 1) * limit).limit(limit).all()

    pending = Review.query.filter_by(status=ReviewStatus.PENDING.value).count()
    approved = Review.query.filter_by(status=ReviewStatus.APPROVED.value).count()
    return {
        "reviews": [r.to_dict() for r in rows],
        "pagination": {"total": total, "page": page, "limit": limit, "pages": -(-total // limit)},
        "counts": {"pending": pending, "approved": approved, "total": pending + approved},
    }


def approve_review(review_id: int, approved_by: str) -> Review:
    review = db.session.get(Review, review_id)
    if review is None:
        raise NotFoundError("Review not found")
    if review.status == ReviewStatus.APPROVED.value:
        raise ValidationError("Review is already approved", field="status")
    review.status = ReviewStatus.APPROVED.value
    review.approved_at = datetime.utcnow()
    review.approved_by = approved_by
    db.session.commit()
    return review


def delete_review(review_id: int):
    review = db.session.get(Review, review_id)
    if review is None:
        raise NotFoundError("Review not found")
    db.session.delete(review)
    db.session.commit()
