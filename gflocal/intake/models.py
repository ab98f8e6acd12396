from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class RequestType(str, Enum):
    city = "city"
    cuisine = "cuisine"
    dietary = "dietary"
    other = "other"


class SubmissionRequest(BaseModel):
    type: RequestType = RequestType.city
    value: str = Field(..., min_length=1, max_length=200)
    details: str = Field(default="", max_length=1000)

    @field_validator("value")
    @classmethod
    def _value_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("value must not be blank")
        return v

    @field_validator("details")
    @classmethod
    def _strip_details(cls, v: str) -> str:
        return v.strip()

    def to_form_data(self) -> dict[str, str]:
        return {
            "form-name": "restaurant-request",
            "request-type": self.type.value,
            "request-value": self.value,
            "request-details": self.details,
        }


class IntakeResult(BaseModel):
    status_code: int
    message: str
