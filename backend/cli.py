import click
import logging
from flask.cli import with_appcontext
from sqlalchemy import func, select
from .models import db, FireDoorSurvey

logger = logging.getLogger(__name__)


@click.command('init-db')
@click.option('--drop', is_flag=True, help='Drop existing tables first (destroys stored surveys).')
@with_appcontext
def init_db_command(drop):
    """Create the survey table."""
    logger.info("Starting database initialization")
    if drop:
        logger.warning("Dropping existing tables")
        db.drop_all()
    db.create_all()
    count = db.session.execute(select(func.count()).select_from(FireDoorSurvey)).scalar()
    logger.info(f"Database tables created successfully ({count} stored surveys)")
    click.echo(f"Initialized the database ({count} stored surveys).")
