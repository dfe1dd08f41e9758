"""Resource types and small helpers shared by the Bill.com syncers."""
from __future__ import annotations
import string

from ..resources import ResourceType, TRAIT_ROLE, TRAIT_USER

RESOURCES_PAGE_SIZE = 50

ORGANIZATION = ResourceType(id="organization", display_name="Organization")
USER = ResourceType(id="user", display_name="User", traits=(TRAIT_USER,))
ROLE = ResourceType(id="role", display_name="Role", traits=(TRAIT_ROLE,))

# Entitlement slug shared by organization and role membership
MEMBER = "member"


def title_case(value: str) -> str:
    """Capitalize each whitespace-separated word ("invoice.create" -> "Invoice.create")."""
    return string.capwords(value)
