import os
import logging
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from dotenv import load_dotenv
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from .config import DevConfig, ProdConfig
from .finance import ValidationError

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()

log = logging.getLogger(__name__)


def create_app(config_name: str | None = None) -> Flask:
    """Application factory with environment based configuration."""
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)
    os.makedirs(app.instance_path, exist_ok=True)

    # Pick configuration
    env = config_name or os.getenv('ENV') or os.getenv('FLASK_ENV') or 'production'
    cfg_cls = DevConfig if env == 'development' else ProdConfig
    app.config.from_object(cfg_cls)
    # re-read so tests can point DATABASE_URL elsewhere after import
    app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv(
        'DATABASE_URL', app.config['SQLALCHEMY_DATABASE_URI']
    )

    # Initialise logging
    logging.basicConfig(level=logging.DEBUG if app.debug else logging.INFO)

    db.init_app(app)
    migrate.init_app(app, db)

    # Ensure models loaded so tables can be created
    from paintledger import models  # noqa
    with app.app_context():
        db.create_all()

    register_error_handlers(app)

    from paintledger.estimates.routes import bp as estimates_bp
    from paintledger.jobs.routes import bp as jobs_bp
    from paintledger.subcontractors.routes import bp as subcontractors_bp
    from paintledger.webhooks import bp as webhooks_bp
    from paintledger.admin import bp as admin_bp
    from paintledger.cli import finance_cli

    app.register_blueprint(estimates_bp, url_prefix='/estimates')
    app.register_blueprint(jobs_bp, url_prefix='/jobs')
    app.register_blueprint(subcontractors_bp, url_prefix='/subcontractors')
    app.register_blueprint(webhooks_bp, url_prefix='/webhooks')
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.cli.add_command(finance_cli)

    return app


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def validation_error(e: ValidationError):
        db.session.rollback()
        log.warning("rejected input %s: %s", e.field, e.message)
        return jsonify(e.to_dict()), 400

    @app.errorhandler(IntegrityError)
    def integrity_error(_):
        db.session.rollback()
        return jsonify(error='Duplicate or FK constraint failed'), 409

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        if e.code == 404:
            return jsonify(error='Not found'), 404
        return jsonify(error=e.description or e.name), e.code or 500

    @app.errorhandler(Exception)
    def server_error(e: Exception):
        db.session.rollback()
        app.logger.exception(e)
        return jsonify(error='Internal server error'), 500
