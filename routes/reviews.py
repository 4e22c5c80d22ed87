from flask import Blueprint, jsonify, request

from services import reviews as review_service
from utils.audit import log_event
from utils.validation import json_body

reviews_bp = Blueprint("reviews", __name__, url_prefix="/reviews")


@reviews_bp.get("")
def list_reviews():
    result = review_service.list_approved(page=request.args.get("page"), limit=request.args.get("limit"))
    return jsonify(result), 200


@reviews_bp.post("")
def submit_review():
    review = review_service.submit_review(json_body())
    log_event("REVIEW_SUBMIT", actor=review.user_phone, entity="review", entity_id=review.id)
    return jsonify(
        message="Thank you for your review! It will be visible once approved by our team.",
        review={"id": review.id, "status": review.status},
    ), 201
