from datetime import datetime, timedelta

import pytest

from models.audit_log import AuditLog
from models.enums import BookingStatus
from services.coupons import create_coupon

from conftest import booking_payload, csrf_headers


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_availability_route(client, monday):
    resp = client.get(f"/slots/availability?ground=match&date={monday.isoformat()}&sport=Cricket")
    assert resp.status_code == 200
    body = resp.get_json()
    assert len(body["slots"]) == 24
    assert body["sports"] == ["Cricket", "Football"]
    assert body["discount_info"].startswith("30% discount")


def test_availability_validates_input(client, monday):
    assert client.get(f"/slots/availability?ground=tennis&date={monday.isoformat()}").status_code == 400
    assert client.get("/slots/availability?ground=match&date=tomorrow").status_code == 400
    resp = client.get(f"/slots/availability?ground=match&date={monday.isoformat()}&sport=Badminton")
    assert resp.status_code == 400
    assert resp.get_json()["field"] == "sport"


def test_pricing_quote_route(client, monday):
    resp = client.get(f"/pricing/quote?ground=match&date={monday.isoformat()}&slots=18:00-19:00,19:00-20:00")
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["final_price"] == 1680.0
    assert body["advance_payment"] == 200.0

    resp = client.get(f"/pricing/quote?ground=practice&date={monday.isoformat()}&slots=2")
    assert resp.get_json()["final_price"] == 500.0


def test_customer_booking_flow(client, monday):
    resp = client.post("/bookings", json=booking_payload(monday))
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["booking"]["status"] == "CONFIRMED"
    assert body["amount_due_online"] == 200.0
    ref = body["booking"]["booking_ref"]

    # the same slot for another sport on the shared ground
    resp = client.post("/bookings", json=booking_payload(monday, sport="Football", slots=["19:00-20:00"]))
    assert resp.status_code == 409
    assert resp.get_json()["slots"] == ["19:00-20:00"]

    resp = client.get(f"/bookings/{ref}?email=asha@example.com")
    assert resp.status_code == 200
    assert client.get(f"/bookings/{ref}?email=someone@example.com").status_code == 404

    resp = client.get("/bookings/history?mobile=9876543210")
    assert resp.get_json()["stats"]["total"] == 1
    assert AuditLog.query.filter_by(action="BOOKING_CREATE").count() == 1


def test_booking_validation_errors(client, monday):
    resp = client.post("/bookings", json={"ground": "match"})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "Validation failed"
    assert {e["field"] for e in body["errors"]} >= {"date", "slots", "name", "mobile", "email"}


def test_booking_refused_when_payments_disabled(app, admin_client, monday):
    resp = admin_client.put(
        "/admin/payment-settings",
        json={"payments_enabled": False, "disabled_reason": "Gateway down"},
        headers=csrf_headers(admin_client),
    )
    assert resp.status_code == 200

    client = app.test_client()
    resp = client.post("/bookings", json=booking_payload(monday))
    assert resp.status_code == 503
    assert resp.get_json()["error"] == "Payment service is temporarily unavailable. Please try again later."
    assert client.get("/payments/status").get_json()["payments_enabled"] is False


def test_coupon_routes(admin_client, monday):
    expiry = (datetime.utcnow() + timedelta(days=10)).isoformat()
    resp = admin_client.post(
        "/admin/coupons",
        json={"code": "save10", "discount_type": "percent", "discount_value": 10, "expiry_date": expiry,
              "show_on_home_page": True, "offer_title": "10% off"},
        headers=csrf_headers(admin_client),
    )
    assert resp.status_code == 201
    coupon_id = resp.get_json()["coupon"]["id"]

    resp = admin_client.post(
        "/coupons/validate",
        json={"code": "SAVE10", "ground": "match", "sport": "Cricket", "date": monday.isoformat(),
              "slots": ["18:00-19:00", "19:00-20:00"], "email": "asha@example.com"},
        headers=csrf_headers(admin_client),
    )
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["discount"] == 168.0
    assert body["final_price"] == 1512.0

    assert [o["code"] for o in admin_client.get("/coupons/offers").get_json()["offers"]] == ["SAVE10"]
    assert admin_client.get("/coupons?email=asha@example.com").get_json()["coupons"][0]["code"] == "SAVE10"

    resp = admin_client.post(f"/admin/coupons/{coupon_id}/toggle", headers=csrf_headers(admin_client))
    assert resp.get_json()["coupon"]["is_active"] is False

    resp = admin_client.delete(f"/admin/coupons/{coupon_id}", headers=csrf_headers(admin_client))
    assert resp.status_code == 200
    assert admin_client.get("/admin/coupons").get_json()["coupons"] == []


def test_invalid_coupon_returns_400(client, monday):
    resp = client.post(
        "/coupons/validate",
        json={"code": "NOPE", "ground": "match", "sport": "Cricket", "date": monday.isoformat(),
              "slots": ["18:00-19:00"]},
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid coupon code"


def test_admin_requires_login(client):
    assert client.get("/admin/bookings").status_code == 401
    assert client.get("/super-admin/permissions").status_code == 401


def test_login_me_logout(client, admin_user):
    resp = client.post("/auth/login", json={"email": "admin@turf.test", "password": "wrong-password"})
    assert resp.status_code == 401

    resp = client.post("/auth/login", json={"email": "ADMIN@turf.test", "password": "admin-pass-123"})
    assert resp.status_code == 200
    assert client.get("/auth/me").get_json()["roles"] == ["ADMIN"]

    # authenticated writes need the CSRF header
    assert client.post("/auth/logout").status_code == 403
    assert client.post("/auth/logout", headers=csrf_headers(client)).status_code == 200
    assert client.get("/auth/me").status_code == 401


def test_admin_offline_booking_and_cancel(admin_client, monday):
    resp = admin_client.post("/admin/bookings", json=booking_payload(monday), headers=csrf_headers(admin_client))
    assert resp.status_code == 201
    booking = resp.get_json()["booking"]
    assert booking["source"] == "OFFLINE"
    assert booking["payment_status"] == "NOT_REQUIRED"

    resp = admin_client.post(
        f"/admin/bookings/{booking['id']}/cancel", json={"reason": "x"}, headers=csrf_headers(admin_client)
    )
    assert resp.status_code == 400

    resp = admin_client.post(
        f"/admin/bookings/{booking['id']}/cancel", json={"reason": "Customer called"}, headers=csrf_headers(admin_client)
    )
    assert resp.status_code == 200
    assert resp.get_json()["booking"]["status"] == BookingStatus.CANCELLED.value

    listed = admin_client.get(f"/admin/bookings?date={monday.isoformat()}&status=CANCELLED").get_json()
    assert listed["count"] == 1


def test_freeze_routes(admin_client, monday):
    target = {"ground": "practice", "sport": "Badminton", "date": monday.isoformat(), "slot": "07:00-08:00"}
    resp = admin_client.post("/admin/slots/freeze", json=target, headers=csrf_headers(admin_client))
    assert resp.status_code == 201

    frozen = admin_client.get("/admin/slots/frozen?ground=practice").get_json()["frozen_slots"]
    assert [f["slot"] for f in frozen] == ["07:00-08:00"]

    grid = admin_client.get(f"/slots/availability?ground=practice&date={monday.isoformat()}").get_json()
    blocked = {s["slot"] for s in grid["slots"] if not s["available"]}
    assert blocked == {"07:00-08:00"}

    resp = admin_client.delete("/admin/slots/freeze", json=target, headers=csrf_headers(admin_client))
    assert resp.status_code == 200
    resp = admin_client.delete("/admin/slots/freeze", json=target, headers=csrf_headers(admin_client))
    assert resp.status_code == 404


def test_permission_flags_gate_admin_routes(client, admin_user, super_admin_user, monday):
    from conftest import login

    login(client, "owner@turf.test", "owner-pass-123")
    resp = client.put(
        "/super-admin/permissions",
        json={"permissions": {"can_freeze_slots": False}},
        headers=csrf_headers(client),
    )
    assert resp.status_code == 200
    assert resp.get_json()["permissions"]["can_freeze_slots"] is False

    bad = client.put("/super-admin/permissions", json={"can_fly": True}, headers=csrf_headers(client))
    assert bad.status_code == 400
    client.post("/auth/logout", headers=csrf_headers(client))

    login(client, "admin@turf.test", "admin-pass-123")
    target = {"ground": "match", "sport": "Cricket", "date": monday.isoformat(), "slot": "07:00-08:00"}
    resp = client.post("/admin/slots/freeze", json=target, headers=csrf_headers(client))
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "Permission denied: can_freeze_slots"
    # other flags still default to allowed
    assert client.get("/admin/bookings").status_code == 200
    assert client.get("/super-admin/permissions").status_code == 403


def test_dashboard(admin_client, monday):
    admin_client.post("/admin/bookings", json=booking_payload(monday), headers=csrf_headers(admin_client))
    stats = admin_client.get("/admin/dashboard").get_json()
    assert stats["bookings_by_status"]["CONFIRMED"] == 1
    assert stats["upcoming"] == 1


def test_unknown_route_is_json(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Not found"}


@pytest.mark.parametrize(
    "field, value",
    [("name", 123), ("email", 5), ("mobile", 9876543210), ("slots", 5), ("coupon_code", 10)],
)
def test_non_text_booking_fields_are_rejected(client, monday, field, value):
    resp = client.post("/bookings", json=booking_payload(monday, **{field: value}))
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "Validation failed"
    assert [e["field"] for e in body["errors"]] == [field]


def test_booking_body_must_be_an_object(client):
    resp = client.post("/bookings", json=["not", "an", "object"])
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Request body must be a JSON object"


def test_coupon_validate_with_odd_types(client, monday):
    resp = client.post(
        "/coupons/validate",
        json={"code": 42, "ground": "match", "sport": "Cricket", "date": monday.isoformat(), "slots": 3},
    )
    assert resp.status_code == 400
    assert resp.get_json()["field"] == "slots"

    create_coupon(
        {"code": "VIPONLY", "discount_type": "flat", "discount_value": 100,
         "expiry_date": (datetime.utcnow() + timedelta(days=10)).isoformat(),
         "assigned_users": ["asha@example.com"]},
        created_by="admin@turf.test",
    )
    resp = client.post(
        "/coupons/validate",
        json={"code": "VIPONLY", "ground": "match", "sport": "Cricket", "date": monday.isoformat(),
              "slots": ["18:00-19:00"], "email": 7},
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "This coupon is not assigned to you"


def test_login_with_non_text_fields(client, admin_user):
    resp = client.post("/auth/login", json={"email": ["admin@turf.test"], "password": 123})
    assert resp.status_code == 400


def test_pricing_quote_caps_slot_count(client, monday):
    resp = client.get(f"/pricing/quote?ground=match&date={monday.isoformat()}&slots=100")
    assert resp.status_code == 400
    assert resp.get_json()["field"] == "slots"

    resp = client.get(f"/pricing/quote?ground=practice&date={monday.isoformat()}&slots=24")
    assert resp.status_code == 200
    assert resp.get_json()["slot_count"] == 24
