import uuid
from datetime import datetime, timezone
from sqlalchemy import DateTime
from sqlmodel import SQLModel


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Timezone-aware current UTC time used for every persisted timestamp"""
    return datetime.now(timezone.utc)


# Column type for timestamps; values always carry tzinfo
Timestamp = DateTime(timezone=True)


class BaseModel(SQLModel):
    """Base class for all persisted entities"""
    pass
