from datetime import datetime
from typing import Optional

from pydantic import Field

from schemas.common import CamelModel


class AppConfigUpdate(CamelModel):
    value: str = Field(..., min_length=1, max_length=255)


class AppConfigOut(CamelModel):
    id: int
    name: str
    value: str
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None
