# social_api/models/base.py
from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase
from social_api.core.config import DataBaseConfig


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=DataBaseConfig.model_fields["naming_convention"].default)
