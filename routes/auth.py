from datetime import datetime

from flask import Blueprint, request, jsonify, current_app, g

from models import db
from models.user import User
from security.csrf import issue_csrf_token, clear_csrf_token
from security.password import verify_password
from security.session import create_session, revoke_session, revoke_all_sessions
from utils.audit import log_event
from utils.auth_context import login_required
from utils.errors import AuthenticationError, AuthorizationError
from utils.validation import clean_text, is_valid_email, json_body

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


@auth_bp.post("/login")
def login():
    data = json_body()
    email = clean_text(data.get("email")).lower()
    password = data.get("password")

    if not is_valid_email(email) or not isinstance(password, str) or not password:
        return jsonify(error="Email and password are required"), 400

    user = User.query.filter_by(email=email).first()
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        log_event("LOGIN_FAIL", user_id=user.id if user else None, metadata={"email": email})
        raise AuthenticationError("Invalid credentials")

    if not user.role_names.intersection({"ADMIN", "SUPER_ADMIN"}):
        log_event("LOGIN_FAIL_NOT_STAFF", user_id=user.id)
        raise AuthorizationError("Staff account required")

    # one live session per staff account
    revoked_count = revoke_all_sessions(user.id)
    raw_token = create_session(user.id)

    user.last_login_at = datetime.utcnow()
    db.session.commit()

    resp = jsonify(message="Login OK", roles=sorted(user.role_names))
    resp.set_cookie(
        current_app.config.get("AUTH_COOKIE_NAME", "turfbook_session"),
        raw_token,
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60),
        path="/",
    )
    resp = issue_csrf_token(resp)

    log_event("LOGIN_SUCCESS", user_id=user.id, metadata={"revoked_sessions": revoked_count})
    return resp, 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(
        id=g.user.id,
        email=g.user.email,
        full_name=g.user.full_name,
        display_name=g.user.display_name,
        roles=sorted(g.user.role_names),
        is_super_admin=g.user.is_super_admin,
    ), 200


@auth_bp.post("/logout")
@login_required
def logout():
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "turfbook_session")
    revoke_session(request.cookies.get(cookie_name))
    log_event("LOGOUT", user_id=g.user.id)

    resp = jsonify(message="Logged out")
    resp.delete_cookie(cookie_name, path="/")
    resp = clear_csrf_token(resp)
    return resp, 200
