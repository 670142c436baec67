"""System setting model"""
from app import db
from .base import BaseModel


class SystemSetting(BaseModel):
    """Key/value store for admin-editable settings such as referral_discount_percent"""
    __tablename__ = 'system_settings'

    key_name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    value = db.Column(db.Text, nullable=True)

    def __repr__(self):
        return f'<SystemSetting {self.key_name}={self.value!r}>'
