from routes.health import health_bp
from routes.auth import auth_bp
from routes.slots import slots_bp
from routes.coupons import coupons_bp
from routes.bookings import bookings_bp
from routes.admin import admin_bp
from routes.super_admin import super_admin_bp
from routes.payments import payments_bp, webhook_bp
from routes.reviews import reviews_bp
from routes.newsletter import newsletter_bp

ALL_BLUEPRINTS = (
    health_bp,
    auth_bp,
    slots_bp,
    coupons_bp,
    bookings_bp,
    admin_bp,
    super_admin_bp,
    payments_bp,
    webhook_bp,
    reviews_bp,
    newsletter_bp,
)
