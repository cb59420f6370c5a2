import uuid
from datetime import datetime
from zoneinfo import ZoneInfo
from sqlalchemy import Column, String, Boolean, Text, DateTime, Index, Enum
from sqlalchemy.orm import declarative_base
from shared.enums import DoorType, InstallationType

Base = declarative_base()

# Survey timestamps are recorded in New Zealand time (NZST/NZDT)
APP_TIMEZONE = ZoneInfo('Pacific/Auckland')


def now():
    """Return current datetime in application timezone (timezone-aware).

    Note: When stored in SQLite, timezone info is stripped (SQLite limitation).
    """
    return datetime.now(APP_TIMEZONE)


def new_id():
    return str(uuid.uuid4())


class FireDoorSurvey(Base):
    """One submitted fire door survey, flattened to columns.

    Nested sections of the record are stored as JSON encoded text.
    """
    __tablename__ = 'fire_door_surveys'
    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime, default=now, nullable=False)
    location_name = Column(String(200), nullable=False, server_default="")
    location = Column(String(100), nullable=False)
    door_type = Column(Enum(DoorType, values_callable=lambda e: [m.value for m in e]), nullable=True)
    installation_type = Column(Enum(InstallationType, values_callable=lambda e: [m.value for m in e]), nullable=True)
    manufacturer = Column(String(200), nullable=False, server_default="")
    doorset_number = Column(String(100), nullable=False, server_default="")
    date_manufactured = Column(String(10))
    fire_rating = Column(String(50))
    door_closer = Column(Text)
    hinges = Column(Text)
    hardware = Column(Text)
    leaf_dimensions = Column(Text)
    second_leaf_dimensions = Column(Text)
    gaps = Column(Text)
    building_features = Column(Text)
    inspection_results = Column(Text)
    photos = Column(Text)
    additional_notes = Column(Text, nullable=False, server_default="")
    pass_fail = Column(Boolean, nullable=False)

    __table_args__ = (
        Index('idx_fire_door_surveys_created_at', 'created_at'),
        Index('idx_fire_door_surveys_door_type', 'door_type'),
    )

    def to_dict(self, columns=None):
        """Row as JSON-ready values, optionally restricted to some columns."""
        result = {}
        for name in columns or [column.name for column in self.__table__.columns]:
            value = getattr(self, name)
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, (DoorType, InstallationType)):
                value = value.value
            result[name] = value
        return result
