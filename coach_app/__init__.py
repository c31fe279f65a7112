"""coach_app package – application factory and blueprint registration."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from time import perf_counter

import click
from flask import Flask, g, request
from flask_jwt_extended import JWTManager
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError

from config import resolve_config
from .blueprints import BLUEPRINTS, URL_ALIASES
from .blueprints.metrics_bp import SCRAPE_ENDPOINT
from .extensions import cors, db, jwt, migrate, limiter
from .logging_config import configure_logging, assign_request_id
from .metrics import record_request
from .utils import ROLE_NUTRI, ROLE_PATIENT, hash_password, normalize_email, week_start_monday


def create_app(config_name: str | None = None) -> Flask:
    """Application factory used by both CLI and runtime servers."""

    app = Flask(__name__)
    _configure_app(app, config_name)
    configure_logging(app)
    _register_extensions(app)
    _register_blueprints(app)
    _register_shellcontext(app)
    _register_cli(app)
    _register_bootstrap(app)
    _register_request_hooks(app)

    return app


def _configure_app(app: Flask, config_name: str | None) -> None:
    env_name = config_name or os.getenv("FLASK_CONFIG")
    config_obj = resolve_config(env_name)
    app.config.from_object(config_obj)


def _register_extensions(app: Flask) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    _configure_jwt(jwt)
    _configure_sqlite_engine(app)
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )
    limiter.default_limits = app.config.get("RATE_LIMIT_DEFAULTS", [])
    limiter.init_app(app)


def _register_blueprints(app: Flask) -> None:
    for blueprint, prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=prefix)
    for rule, endpoint, view_func, methods in URL_ALIASES:
        app.add_url_rule(rule, endpoint=endpoint, view_func=view_func, methods=list(methods))


def _register_shellcontext(app: Flask) -> None:
    from . import models

    @app.shell_context_processor
    def shell_context():
        return {
            "db": db,
            "User": models.User,
            "Plan": models.Plan,
            "ContentLesson": models.ContentLesson,
            "AssistantUsage": models.AssistantUsage,
        }


def _configure_jwt(jwt_manager: JWTManager) -> None:
    from flask import jsonify

    from .models import User

    @jwt_manager.user_lookup_loader
    def user_lookup_callback(_jwt_header, jwt_data):
        identity = jwt_data.get("sub")
        if identity is None:
            return None
        try:
            identity_int = int(identity)
        except (TypeError, ValueError):
            return None
        return db.session.get(User, identity_int)

    @jwt_manager.user_lookup_error_loader
    def user_lookup_error_callback(_jwt_header, _jwt_data):
        return jsonify({"error": "No autenticado."}), 401

    @jwt_manager.expired_token_loader
    def expired_token_callback(jwt_header, jwt_data):
        return jsonify({"error": "Token has expired"}), 401

    @jwt_manager.invalid_token_loader
    def invalid_token_callback(error_string):
        return jsonify({"error": "Invalid token", "detail": error_string}), 401

    @jwt_manager.unauthorized_loader
    def missing_token_callback(error_string):
        return jsonify({"error": "Missing authorization token"}), 401


def _register_bootstrap(app: Flask) -> None:
    @app.before_request
    def ensure_schema():
        if app.config.get("_SCHEMA_READY"):
            return
        try:
            _ensure_schema(app)
            app.config["_SCHEMA_READY"] = True
        except SQLAlchemyError as exc:  # pragma: no cover
            # Retried on the next request; migrations may still be running.
            app.logger.warning("Schema bootstrap skipped: %s", exc)


def _register_request_hooks(app: Flask) -> None:
    @app.before_request
    def start_request():
        assign_request_id()
        g.request_started_at = perf_counter()

    @app.after_request
    def finalize(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers["X-Request-ID"] = request_id
        started = getattr(g, "request_started_at", None)
        latency = perf_counter() - started if started else 0.0
        endpoint = request.endpoint or request.path
        if endpoint == SCRAPE_ENDPOINT:
            return response
        record_request(request.method, endpoint, response.status_code, latency)
        return response


def _configure_sqlite_engine(app: Flask) -> None:
    uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if not uri.startswith("sqlite"):
        return
    busy_timeout_ms = int(app.config.get("SQLITE_BUSY_TIMEOUT_MS", 15000))

    with app.app_context():
        engine = db.engine

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):  # pragma: no cover
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA journal_mode=WAL;")
                cursor.execute(f"PRAGMA busy_timeout={busy_timeout_ms};")
                cursor.execute("PRAGMA synchronous=NORMAL;")
            finally:
                cursor.close()


def _ensure_schema(app: Flask) -> None:
    with app.app_context():
        db.create_all()


def _register_cli(app: Flask) -> None:
    @app.cli.command("seed-demo")
    def seed_demo() -> None:
        """Seed a demo patient, nutritionist, lesson and current-week plan."""

        from .models import ContentLesson, Plan, User

        created = []
        with app.app_context():
            _ensure_schema(app)

            nutri_email = normalize_email(app.config["SEED_NUTRI_EMAIL"])
            if not User.query.filter_by(email=nutri_email).first():
                db.session.add(
                    User(
                        email=nutri_email,
                        password_hash=hash_password(app.config["SEED_NUTRI_PASSWORD"]),
                        role=ROLE_NUTRI,
                        full_name="Nutri Demo",
                        locale="es",
                    )
                )
                created.append("nutri")

            patient_email = normalize_email(app.config["SEED_PATIENT_EMAIL"])
            patient = User.query.filter_by(email=patient_email).first()
            if not patient:
                patient = User(
                    email=patient_email,
                    password_hash=hash_password(app.config["SEED_PATIENT_PASSWORD"]),
                    role=ROLE_PATIENT,
                    full_name="Paciente Demo",
                    locale="es",
                )
                db.session.add(patient)
                db.session.flush()
                created.append("patient")

            if not ContentLesson.query.filter_by(published=True).first():
                db.session.add(
                    ContentLesson(
                        title_es="Hidratación",
                        body_es="Bebe agua a lo largo del día.",
                        title_eu="Hidratazioa",
                        body_eu="Edan ura egun osoan zehar.",
                        tags=["habitos"],
                        published=True,
                    )
                )
                created.append("lesson")

            week_start = week_start_monday()
            if not Plan.query.filter_by(patient_id=patient.id, week_start=week_start).first():
                db.session.add(
                    Plan(
                        patient_id=patient.id,
                        week_start=week_start,
                        plan_data={"days": [{"day": "lunes", "meals": ["Desayuno: avena con fruta"]}]},
                        schema_version=2,
                        status="published",
                        published_at=datetime.now(timezone.utc),
                    )
                )
                created.append("plan")

            if created:
                db.session.commit()
                click.echo(f"Seeded demo data: {', '.join(created)}")
            else:
                click.echo("Demo data already exists; nothing to do.")
