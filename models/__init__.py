from .db import db
from .user import User, Role, user_roles
from .session import Session
from .audit_log import AuditLog
from .booking import Booking, BookingSlot
from .frozen_slot import FrozenSlot
from .coupon import Coupon, CouponUsage
from .payment_settings import PaymentSettings
from .admin_permissions import AdminPermissions, PERMISSION_KEYS
from .review import Review
from .newsletter_subscriber import NewsletterSubscriber
