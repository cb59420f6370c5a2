"""Flask application factory for the Fire Door Survey backend."""
from flask import Flask
import logging
from pathlib import Path
from .models import db
from .blueprints import surveys, storage
from .cli import init_db_command
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_BUCKETS = ('fire-door-photos',)


def create_app(test_config=None):
    """Flask application factory for the survey backend.

    Creates and configures a Flask application instance with:
    - SQLAlchemy row store for the fire_door_surveys table
    - Object store endpoints over the configured cloud storage
    - CLI command registration

    Args:
        test_config (dict, optional): Configuration overrides for testing

    Returns:
        Flask: Configured Flask application instance
    """
    setup_logging()
    logger.info("Starting Flask application initialization")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_mapping(
        STORAGE_ALLOWED_BUCKETS=DEFAULT_BUCKETS,
        MAX_CONTENT_LENGTH=20 * 1024 * 1024,
        JSON_SORT_KEYS=False,
    )

    if test_config is None:
        # Load the instance config, if it exists, when not testing
        if app.config.from_pyfile('config.py', silent=True):
            logger.info("Loaded configuration from instance/config.py")
        else:
            logger.debug("No instance config file found, using defaults")
    else:
        app.config.from_mapping(test_config)
        logger.info("Loaded test configuration")

    Path(app.instance_path).mkdir(parents=True, exist_ok=True)

    # Only set default database URI if not already set (e.g., by tests)
    if 'SQLALCHEMY_DATABASE_URI' not in app.config:
        db_path = Path(app.instance_path) / 'fire_door_surveys.db'
        app.config['SQLALCHEMY_DATABASE_URI'] = f'sqlite:///{db_path}'
    logger.info(f"Using database URI: {app.config['SQLALCHEMY_DATABASE_URI']}")
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    db.init_app(app)

    app.register_blueprint(surveys.bp)
    app.register_blueprint(storage.bp)
    logger.debug("Registered surveys and storage blueprints")

    app.cli.add_command(init_db_command)

    logger.info("Flask application initialization completed successfully")
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True)
