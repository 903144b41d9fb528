import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

# Base class for all models
Base = declarative_base()


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the storage convention for every timestamp column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return uuid.uuid4().hex
