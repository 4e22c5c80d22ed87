import logging

import click
from flask import Flask, request, g, jsonify
from flask_migrate import Migrate
from sqlalchemy.exc import OperationalError

from config import Config
from models import db
from routes import ALL_BLUEPRINTS
from security.csrf import CSRF_EXEMPT_PATHS, require_csrf
from services.pricing import configure_day_cache
from utils.auth_context import load_current_user
from utils.errors import AppError
from utils.seed import seed_roles

logger = logging.getLogger(__name__)


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=logging.DEBUG if app.config.get("DEBUG") else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    for bp in ALL_BLUEPRINTS:
        app.register_blueprint(bp)

    db.init_app(app)
    Migrate(app, db)

    configure_day_cache(
        app.config.get("DAY_CACHE_TTL_SECONDS", 3600),
        app.config.get("DAY_CACHE_MAX_ENTRIES", 100),
    )

    # Seed staff roles at startup (idempotent); skipped until migrations have run
    with app.app_context():
        try:
            seed_roles()
        except OperationalError:
            db.session.rollback()
            logger.warning("Roles table missing, run `flask db upgrade`")

    @app.before_request
    def _load_user():
        load_current_user()

    @app.before_request
    def _csrf_protect():
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            if request.path in CSRF_EXEMPT_PATHS:
                return None
            # only cookie-authenticated staff requests carry CSRF risk
            if getattr(g, "user", None) is not None:
                failure = require_csrf()
                if failure:
                    return failure

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_error_handlers(app)
    register_cli(app)

    return app


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def _app_error(exc):
        db.session.rollback()
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(OperationalError)
    def _db_unavailable(exc):
        db.session.rollback()
        logger.error("Database unavailable: %s", exc)
        return jsonify(error="Service is temporarily unavailable. Please try again."), 503

    @app.errorhandler(404)
    def _not_found(exc):
        return jsonify(error="Not found"), 404

    @app.errorhandler(405)
    def _method_not_allowed(exc):
        return jsonify(error="Method not allowed"), 405


def register_cli(app):
    @app.cli.command("create-admin")
    @click.argument("email")
    @click.argument("password")
    @click.option("--super", "super_admin", is_flag=True, help="Also grant SUPER_ADMIN.")
    def create_admin(email, password, super_admin):
        """Create a staff account, or promote an existing one."""
        from utils.seed import create_staff_user

        try:
            user = create_staff_user(email, password, super_admin=super_admin)
        except ValueError as exc:
            raise click.ClickException(str(exc))
        click.echo(f"{user.email} has roles {', '.join(sorted(user.role_names))}")

    @app.cli.command("sweep-bookings")
    def sweep_bookings():
        """Mark finished CONFIRMED bookings as COMPLETED."""
        from services.bookings import sweep_completed
        from utils.clock import local_now

        click.echo(f"{sweep_completed(local_now())} bookings completed")

    @app.cli.command("cleanup-freezes")
    def cleanup_freezes():
        """Delete freezes whose slot has already started."""
        from services.availability import cleanup_expired_freezes
        from utils.clock import local_now

        click.echo(f"{cleanup_expired_freezes(local_now())} frozen slots removed")


if __name__ == "__main__":
    app = create_app()
    app.run(host="127.0.0.1", port=5002)
