"""
Upsert contract for doctor records.

A single schema shared by every entry point (CLI, services, future HTTP
layers) so the same rules are never written twice.
"""

import re
from datetime import time
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError
from .models import DoctorAvailability

TIME_PATTERN = re.compile(r"^\d{2}:\d{2}(:\d{2})?$")


class UpsertDoctorInput(BaseModel):
    """
    Validated payload for creating or replacing a doctor.

    Accepts snake_case field names as well as the camelCase keys used by
    web forms (``availableFromTime`` and friends).
    """
    model_config = ConfigDict(populate_by_name=True)

    # Opaque store id, not necessarily a UUID (fixtures use slugs)
    id: Optional[str] = None
    name: str
    specialty: str
    appointment_price_in_cents: int = Field(alias="appointmentPriceInCents", ge=1)
    available_from_week_day: int = Field(alias="availableFromWeekDay", ge=0, le=6)
    available_to_week_day: int = Field(alias="availableToWeekDay", ge=0, le=6)
    available_from_time: str = Field(alias="availableFromTime")
    available_to_time: str = Field(alias="availableToTime")
    avatar_image_url: Optional[str] = Field(default=None, alias="avatarImageUrl")

    @field_validator("name", "specialty")
    @classmethod
    def validate_text(cls, value: str, info: ValidationInfo) -> str:
        """Strip surrounding whitespace and require at least 2 characters."""
        value = value.strip()
        if len(value) < 2:
            raise ValueError(f"{info.field_name} must have at least 2 characters")
        return value

    @field_validator("available_from_time", "available_to_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Normalize HH:MM to HH:MM:SS and reject impossible times."""
        value = value.strip()
        if not TIME_PATTERN.match(value):
            raise ValueError(f"Time must be formatted as HH:MM:SS, got '{value}'")
        if len(value) == 5:
            value = f"{value}:00"
        # Rejects 25:00:00 and similar
        time.fromisoformat(value)
        return value

    @field_validator("available_to_time")
    @classmethod
    def validate_time_order(cls, value: str, info: ValidationInfo) -> str:
        """Ensure the window closes after it opens (same day, no wrap)."""
        from_time = info.data.get("available_from_time")
        if from_time is not None and not from_time < value:
            raise ValueError("End time must be later than start time")
        return value

    def to_availability(self) -> DoctorAvailability:
        return DoctorAvailability(
            from_week_day=self.available_from_week_day,
            to_week_day=self.available_to_week_day,
            from_time=time.fromisoformat(self.available_from_time),
            to_time=time.fromisoformat(self.available_to_time),
        )


_FIELD_BY_ALIAS = {
    (info.alias or name): name for name, info in UpsertDoctorInput.model_fields.items()
}


def validate_upsert_doctor(data: Mapping[str, Any]) -> UpsertDoctorInput:
    """
    Validate a raw upsert payload.

    Args:
        data: Mapping with snake_case or camelCase keys

    Returns:
        The validated UpsertDoctorInput

    Raises:
        ValidationError: With one or more messages per failing field
    """
    try:
        return UpsertDoctorInput.model_validate(dict(data))
    except PydanticValidationError as exc:
        errors: Dict[str, List[str]] = {}
        for error in exc.errors():
            loc = error.get("loc") or ("__root__",)
            field_name = _FIELD_BY_ALIAS.get(str(loc[0]), str(loc[0]))
            message = error["msg"].removeprefix("Value error, ")
            errors.setdefault(field_name, []).append(message)

        summary = "; ".join(
            f"{field_name}: {', '.join(messages)}" for field_name, messages in errors.items()
        )
        raise ValidationError(f"Invalid doctor data: {summary}", errors=errors) from exc
