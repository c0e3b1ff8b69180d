import logging

import click
from flask import Flask, jsonify
from flask_migrate import Migrate

from config import Config
from models import db
from routes import health_bp, auth_bp, catalog_bp, booking_bp
from scheduling import BookingError, generate_for_all_active_programs, generate_for_program
from utils.auth_context import load_current_user
from utils.seed import seed_catalog

logger = logging.getLogger(__name__)


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(booking_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Keep the booking window filled at startup; failures are logged, not raised
    if app.config.get("GENERATE_SLOTS_ON_STARTUP"):
        with app.app_context():
            generate_for_all_active_programs(db.session)

    @app.before_request
    def _load_user():
        load_current_user()

    @app.errorhandler(BookingError)
    def _booking_error(exc: BookingError):
        if exc.status_code >= 500:
            # storage details stay in the log
            return jsonify(error="Server error", kind=exc.kind), exc.status_code
        return jsonify(exc.to_dict()), exc.status_code

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------

def register_cli(app):
    @app.cli.command("generate-slots")
    @click.option("--program-id", type=int, default=None, help="Only this program.")
    def generate_slots(program_id):
        """Fill the booking window with time slots from the weekly schedules."""
        if program_id is not None:
            created = generate_for_program(db.session, program_id)
            click.echo(f"Program {program_id}: {created} slots created")
            return
        results = generate_for_all_active_programs(db.session)
        for pid, created in sorted(results.items()):
            click.echo(f"Program {pid}: {created} slots created")
        click.echo(f"{len(results)} programs processed")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Insert demo categories, programs and weekly schedules (idempotent)."""
        added = seed_catalog()
        click.echo(f"{added} programs added")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
