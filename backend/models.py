from flask_sqlalchemy import SQLAlchemy
from shared.models import Base, FireDoorSurvey

db = SQLAlchemy(model_class=Base)

__all__ = ['db', 'FireDoorSurvey']
