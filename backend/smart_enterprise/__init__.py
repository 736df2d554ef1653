# backend/smart_enterprise/__init__.py
from flask import Flask, current_app, request

from .config import Config
from .extensions import db, migrate
from .errors import register_error_handlers
from .logging_setup import configure_logging
from .rate_limit import init_rate_limiters
from .request_context import RequestContext, reset_context, set_context

TENANT_HEADER = "X-Tenant-Id"


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    register_error_handlers(app)

    @app.before_request
    def bind_request_context():
        tenant = request.headers.get(TENANT_HEADER) or None
        request.environ["smart_enterprise.context_token"] = set_context(RequestContext(tenant=tenant))
        current_app.logger.info("%s %s tenant=%s", request.method, request.path, tenant)

    @app.teardown_request
    def release_request_context(exc):
        token = request.environ.pop("smart_enterprise.context_token", None)
        if token is not None:
            reset_context(token)

    # Registered after the context hook so the global limit sees a bound context
    init_rate_limiters(app)

    from .services.token_blacklist_service import init_token_blacklist
    init_token_blacklist(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.employees import employees_bp
    from .routes.products import products_bp
    from .routes.orders import orders_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(orders_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin in app.config.get("CORS_ALLOWED_ORIGINS", []):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type, X-Tenant-Id"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
