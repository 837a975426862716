"""Common types shared across all models."""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator


def assume_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; aware values keep their own offset."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# Offset-preserving instant. Arithmetic with timedelta keeps the tzinfo, so a
# venue's +09:00 survives every deadline subtraction.
Instant = Annotated[datetime, AfterValidator(assume_utc)]
