from flask import Blueprint, jsonify, g

from models import db
from models.admin_permissions import PERMISSION_KEYS
from security.rbac import get_or_create_permissions, require_roles
from utils.audit import log_event
from utils.validation import json_body

super_admin_bp = Blueprint("super_admin", __name__, url_prefix="/super-admin")


@super_admin_bp.get("/permissions")
@require_roles("SUPER_ADMIN")
def get_permissions():
    return jsonify(permissions=get_or_create_permissions().to_dict()), 200


@super_admin_bp.put("/permissions")
@require_roles("SUPER_ADMIN")
def update_permissions():
    data = json_body()
    flags = data.get("permissions", data)
    if not isinstance(flags, dict):
        return jsonify(error="permissions must be an object"), 400

    unknown = sorted(k for k in flags if k not in PERMISSION_KEYS)
    if unknown:
        return jsonify(error="Unknown permission keys", keys=unknown), 400
    bad = sorted(k for k, v in flags.items() if not isinstance(v, bool))
    if bad:
        return jsonify(error="Permission values must be booleans", keys=bad), 400

    row = get_or_create_permissions()
    before = row.to_dict()
    for key, value in flags.items():
        setattr(row, key, value)
    row.updated_by = g.user.email
    db.session.commit()

    changed = {k: v for k, v in flags.items() if before.get(k) != v}
    log_event("ADMIN_PERMISSIONS_UPDATE", user_id=g.user.id, entity="admin_permissions", entity_id=row.id, metadata=changed)
    return jsonify(permissions=row.to_dict()), 200
