"""
Domain Models - Businesses, Customers and Pilot Leads
======================================================

Plain records shared by every layer. No persistence or HTTP concerns here:
stores build these from their own rows, the web layer turns them into JSON.

FIELD SCHEMA:
- REQUIRED_FIELDS lists what must be present when a record is created
- DATE_FIELDS / DATETIME_FIELDS / BOOL_FIELDS drive coercion in the stores
"""

from dataclasses import dataclass, fields
from datetime import date, datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Type


class CustomerStatus(str, Enum):
    """Review lifecycle of a customer. Only PENDING -> REQUESTED happens here."""
    PENDING = "pending"
    REQUESTED = "requested"
    REVIEWED = "reviewed"
    BAD_EXPERIENCE = "bad_experience"


class EntityKind(str, Enum):
    """Record collections. The value doubles as the table name."""
    BUSINESS = "businesses"
    CUSTOMER = "customers"
    PILOT_LEAD = "pilot_leads"


@dataclass
class Business:
    """A tenant that requests reviews from its own customers."""
    id: str
    name: str
    owner_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    business_type: Optional[str] = None     # clinic, gym, restaurant, ...
    google_review_link: Optional[str] = None
    pilot_active: bool = False
    pilot_start_date: Optional[date] = None
    pilot_end_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Customer:
    """A customer of a business, target of review requests."""
    id: str
    business_id: str
    phone: str
    name: str = ""
    last_visit_date: Optional[date] = None
    review_request_sent_at: Optional[datetime] = None
    review_link_clicked_at: Optional[datetime] = None
    negative_feedback: Optional[str] = None
    status: str = CustomerStatus.PENDING.value
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class PilotLead:
    """A prospective platform customer captured from the landing page."""
    id: str
    name: str
    business_name: str
    phone: str
    email: Optional[str] = None
    business_type: Optional[str] = None
    notes: Optional[str] = None
    converted_to_business: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


RECORD_TYPES: Dict[EntityKind, Type] = {
    EntityKind.BUSINESS: Business,
    EntityKind.CUSTOMER: Customer,
    EntityKind.PILOT_LEAD: PilotLead,
}

REQUIRED_FIELDS: Dict[EntityKind, FrozenSet[str]] = {
    EntityKind.BUSINESS: frozenset({"name"}),
    EntityKind.CUSTOMER: frozenset({"business_id", "phone"}),
    EntityKind.PILOT_LEAD: frozenset({"name", "business_name", "phone"}),
}

DATE_FIELDS = frozenset({"pilot_start_date", "pilot_end_date", "last_visit_date"})
DATETIME_FIELDS = frozenset({
    "created_at", "updated_at", "review_request_sent_at", "review_link_clicked_at",
})
BOOL_FIELDS = frozenset({"pilot_active", "converted_to_business"})

STATUS_VALUES = frozenset(s.value for s in CustomerStatus)


def kind_of(record) -> EntityKind:
    """Return the EntityKind for a record instance."""
    for kind, record_type in RECORD_TYPES.items():
        if isinstance(record, record_type):
            return kind
    raise TypeError(f"Not a domain record: {type(record).__name__}")


def field_names(kind: EntityKind) -> list[str]:
    """Ordered field names of the record type for a kind."""
    return [f.name for f in fields(RECORD_TYPES[kind])]
