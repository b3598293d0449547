from sqlalchemy import Column, Integer, Text, DateTime, func
from ..core.db import Base


class StoreSnapshot(Base):
    __tablename__ = "StoreSnapshot"

    # Single row (SnapshotID=1); the whole aggregate is rewritten on every save
    SnapshotID = Column(Integer, primary_key=True, autoincrement=False)
    Payload    = Column(Text, nullable=False)
    SavedAt    = Column(DateTime, nullable=False, server_default=func.current_timestamp())
