from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import logging
import os

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def _configure_logging(level_name: str):
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger('procurement').setLevel(level)


def _register_jwt_handlers():
    from .services.reporting import error_envelope

    def _unauthorized(detail):
        return error_envelope(401, 'Unauthorized', detail, 'Unauthorized'), 401

    @jwt.unauthorized_loader
    def missing_token(reason):  # type: ignore
        return _unauthorized(reason)

    @jwt.invalid_token_loader
    def invalid_token(reason):  # type: ignore
        return _unauthorized(reason)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):  # type: ignore
        return _unauthorized('Token has expired')


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    _configure_logging(app.config['LOG_LEVEL'])

    # Database
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, echo=False, future=True)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    jwt.init_app(app)
    _register_jwt_handlers()

    from .routes.auth import auth_bp
    from .routes.purchase import purchase_bp
    from .routes.reports import rpt_bp
    from .routes.suppliers import suppliers_bp
    from .routes.inventory import inv_bp
    app.register_blueprint(auth_bp)
    app.register_blueprint(purchase_bp, url_prefix='/purchase')
    app.register_blueprint(rpt_bp, url_prefix='/purchase/reports')
    app.register_blueprint(suppliers_bp, url_prefix='/purchase')  # suppliers under /purchase namespace
    app.register_blueprint(inv_bp, url_prefix='/inventory')

    @app.teardown_appcontext
    def remove_session(exc):  # type: ignore
        SessionLocal.remove()

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    from .errors import ServiceError
    from .services.reporting import error_envelope

    # Unified error handler producing the failure envelope
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, ServiceError):
            SessionLocal.rollback()
            if e.status_code >= 500:
                app.logger.error('%s: %s', e.kind, e.message)
            return error_envelope(e.status_code, e.title, e.detail, e.kind, e.message), e.status_code
        if isinstance(e, HTTPException):
            return error_envelope(e.code, e.name, e.description, type(e).__name__), e.code
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        SessionLocal.rollback()
        return error_envelope(500, 'Internal Server Error', 'Unexpected error', 'InternalError'), 500

    # OpenAPI spec route (minimal)
    from .openapi import build_openapi_spec

    @app.route('/openapi.json')
    def openapi_spec():
        return build_openapi_spec()

    @app.route('/docs')
    def docs_index():
        # Lightweight HTML referencing Redoc CDN (no local install) for quick browsing
        return (
            "<!DOCTYPE html><html><head><title>API Docs</title>"
            "<link rel=\"stylesheet\" href=\"https://cdn.jsdelivr.net/npm/redoc@next/bundles/redoc.standalone.css\" />"
            "</head><body><redoc spec-url='/openapi.json'></redoc>"
            "<script src='https://cdn.jsdelivr.net/npm/redoc@next/bundles/redoc.standalone.js'></script>"
            "</body></html>"
        )

    return app


def get_db():
    return SessionLocal()
