"""
Request bodies and response shaping for the JSON API.

Wire format is camelCase (businessName, googleReviewLink, ...); records use
snake_case internally. Every body field is optional at the pydantic level so
handlers can answer missing required fields with their own 400 message.
"""

from dataclasses import asdict
from datetime import date, datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def to_api(record) -> dict[str, Any]:
    """Domain record -> camelCase JSON-ready dict."""
    return {camel(key): value for key, value in asdict(record).items()}


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PilotLeadIn(_Body):
    name: Optional[str] = None
    business_name: Optional[str] = Field(default=None, alias="businessName")
    phone: Optional[str] = None
    email: Optional[str] = None
    business_type: Optional[str] = Field(default=None, alias="businessType")
    notes: Optional[str] = None


class BusinessIn(_Body):
    name: Optional[str] = None
    owner_name: Optional[str] = Field(default=None, alias="ownerName")
    email: Optional[str] = None
    phone: Optional[str] = None
    business_type: Optional[str] = Field(default=None, alias="businessType")
    google_review_link: Optional[str] = Field(default=None, alias="googleReviewLink")
    pilot_active: Optional[bool] = Field(default=None, alias="pilotActive")
    pilot_start_date: Optional[date] = Field(default=None, alias="pilotStartDate")
    pilot_end_date: Optional[date] = Field(default=None, alias="pilotEndDate")


class CustomerIn(_Body):
    name: Optional[str] = None
    phone: Optional[str] = None
    # Plain dates or full timestamps (toISOString); the store keeps the date part
    last_visit_date: Optional[Union[date, datetime]] = Field(default=None, alias="lastVisitDate")

    @field_validator("phone", mode="before")
    @classmethod
    def phone_as_text(cls, value):
        # Spreadsheet exports often send phone numbers as JSON numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class CustomerImportIn(_Body):
    business_id: Optional[str] = Field(default=None, alias="businessId")
    customers: Optional[List[CustomerIn]] = None
