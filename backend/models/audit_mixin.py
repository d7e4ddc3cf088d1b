from sqlalchemy import Column, DateTime, String

from utils.date_utils import now_local


class TimestampMixin:
    """Mixin that provides created/updated timestamps and user info.

    Timestamps are timezone-aware and produced in the application timezone
    (settings.APP_TIMEZONE). DateTime(timezone=True) keeps the offset on
    databases that support it.
    """
    created_at = Column(DateTime(timezone=True), default=now_local, nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=now_local)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
