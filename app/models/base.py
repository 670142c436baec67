"""
Base model with common fields and methods
"""
from app import db
from datetime import datetime, date, timezone


def utcnow():
    return datetime.now(timezone.utc)


def as_utc(value):
    """Treat naive datetimes read back from the database as UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_camel(name):
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


class BaseModel(db.Model):
    """Abstract base model with common fields"""
    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self, exclude=None):
        """
        Convert model to a camelCase dictionary

        Args:
            exclude (list): List of column names to exclude

        Returns:
            dict: Model as dictionary
        """
        exclude = exclude or []
        data = {}

        for column in self.__table__.columns:
            if column.name in exclude:
                continue
            value = getattr(self, column.name)

            if isinstance(value, (datetime, date)):
                value = value.isoformat()

            data[to_camel(column.name)] = value

        return data
