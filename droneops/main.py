import logging
import os

from flask import Flask

from .config import CONFIGS
from .extensions import db, migrate, jwt, ma, cors, bcrypt


def create_app(config_name=None):
    app = Flask(__name__, instance_relative_config=False)
    env = config_name or os.getenv("FLASK_ENV", "development")
    app.config.from_object(CONFIGS.get(env, CONFIGS["development"]))

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(app.config["LOG_LEVEL"])
    logging.getLogger("droneops").setLevel(app.config["LOG_LEVEL"])

    # initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)
    origins = [o.strip() for o in app.config["CORS_ORIGINS"].split(",")]
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": origins}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    )
    bcrypt.init_app(app)

    # models must be imported before create_all / migrations see them
    from droneops.models import user, staff, order, assignment, submission, comment, cancellation, inquiry  # noqa: F401

    # register blueprints
    from droneops.routes.auth_routes import bp as auth_bp
    from droneops.routes.order_routes import bp as order_bp
    from droneops.routes.submission_routes import bp as submission_bp
    from droneops.routes.comment_routes import bp as comment_bp
    from droneops.routes.cancellation_routes import bp as cancellation_bp
    from droneops.routes.admin_staff_routes import bp as admin_staff_bp
    from droneops.routes.inquiry_routes import bp as inquiry_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(order_bp)
    app.register_blueprint(submission_bp)
    app.register_blueprint(comment_bp)
    app.register_blueprint(cancellation_bp)
    app.register_blueprint(admin_staff_bp)
    app.register_blueprint(inquiry_bp)

    # error handlers to match required error format
    from droneops.utils.response_formatter import error_response
    from droneops.utils.exceptions import ServiceError

    @app.errorhandler(ServiceError)
    def service_error(e):
        db.session.rollback()
        app.logger.info("[%s] %s", e.code, e.message)
        return error_response(e.code, e.message, e.details, status=e.status)

    @app.errorhandler(400)
    def bad_request(e):
        return error_response("BAD_REQUEST", str(e), status=400)

    @app.errorhandler(401)
    def unauthorized(e):
        return error_response("UNAUTHORIZED", str(e), status=401)

    @app.errorhandler(403)
    def forbidden(e):
        return error_response("FORBIDDEN", str(e), status=403)

    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", "Resource not found", status=404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return error_response("METHOD_NOT_ALLOWED", str(e), status=405)

    @app.errorhandler(500)
    def server_error(e):
        return error_response("SERVER_ERROR", "Internal server error", status=500)

    from droneops.cli_commands import register_commands
    register_commands(app)

    return app
