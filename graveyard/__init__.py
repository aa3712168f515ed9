from __future__ import annotations

import click
from flask import Flask, jsonify

from graveyard.burials.routes import burials_bp
from graveyard.core.auth import auth_bp
from graveyard.core.config import Config
from graveyard.core.extensions import db, login_manager, migrate
from graveyard.core.logging_setup import setup_logging
from graveyard.core.models import User, seed_demo_data
from graveyard.core.services import init_services, start_services
from graveyard.maintenance.routes import maintenance_bp


def create_app(config_object: type[Config] | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    setup_logging(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(maintenance_bp)
    app.register_blueprint(burials_bp)

    init_services(app)
    register_cli(app)
    register_error_handlers(app)
    if app.config.get("AUTOSTART_SERVICES", True):
        start_services(app)
    return app


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(400)
    def bad_request(_error):
        return jsonify({"error": "Bad request"}), 400

    @app.errorhandler(401)
    def unauthorized(_error):
        return jsonify({"error": "Authentication required"}), 401

    @app.errorhandler(403)
    def forbidden(_error):
        return jsonify({"error": "Forbidden"}), 403

    @app.errorhandler(404)
    def not_found(_error):
        return jsonify({"error": "Not found"}), 404


def register_cli(app: Flask) -> None:
    @app.cli.command("seed-demo")
    @click.option("--reset", is_flag=True, help="Delete existing data before seed.")
    def seed_demo(reset: bool) -> None:
        """Seed demo users, plots and graves."""
        if reset:
            db.drop_all()
            db.create_all()
        if not User.query.first():
            seed_demo_data(db.session)
            click.echo("Demo data seeded.")
        else:
            click.echo("Seed skipped: existing users found.")

    @app.cli.command("tasks-sweep")
    def tasks_sweep() -> None:
        """Run one overdue sweep over the stored maintenance tasks."""
        from graveyard.core.services import maintenance_service

        changed = maintenance_service().sweep_overdue()
        if not changed:
            click.echo("No tasks became overdue.")
            return
        click.echo(f"Marked overdue: {', '.join(changed)}")


@login_manager.user_loader
def load_user(user_id: str) -> User | None:
    return db.session.get(User, int(user_id))
