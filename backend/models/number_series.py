from sqlalchemy import Column, Integer, String
from database import Base


class NumberSeries(Base):
    """Last number handed out per document type. Numbers are never reused."""
    __tablename__ = "number_series"

    name = Column(String(50), primary_key=True)
    last_value = Column(Integer, default=0, nullable=False)
