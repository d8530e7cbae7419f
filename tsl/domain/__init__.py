# Domain Layer
# ============
# Pure records and enums: Business, Customer, PilotLead, CustomerStatus.
# No external dependencies; every other layer builds on these.

from .models import (
    Business,
    Customer,
    CustomerStatus,
    EntityKind,
    PilotLead,
)

__all__ = ["Business", "Customer", "CustomerStatus", "EntityKind", "PilotLead"]
