from flask import Blueprint, jsonify, request

from services import newsletter as newsletter_service
from utils.audit import log_event
from utils.validation import json_body

newsletter_bp = Blueprint("newsletter", __name__, url_prefix="/newsletter")


@newsletter_bp.post("/subscribe")
def subscribe():
    subscriber, message = newsletter_service.subscribe(json_body().get("email"))
    log_event("NEWSLETTER_SUBSCRIBE", actor=subscriber.email, entity="newsletter_subscriber", entity_id=subscriber.id)
    return jsonify(message=message), 200


@newsletter_bp.get("/subscribe")
def subscription_status():
    return jsonify(is_subscribed=newsletter_service.is_subscribed(request.args.get("email"))), 200


@newsletter_bp.get("/unsubscribe")
def unsubscribe():
    subscriber, already = newsletter_service.unsubscribe(request.args.get("token"))
    if already:
        return jsonify(message="You have already been unsubscribed from our newsletter."), 200
    log_event("NEWSLETTER_UNSUBSCRIBE", actor=subscriber.email, entity="newsletter_subscriber", entity_id=subscriber.id)
    return jsonify(message="You have been successfully unsubscribed from our newsletter."), 200
