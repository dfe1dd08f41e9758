"""Generic identity-governance model: resources, entitlements and grants.

Syncers project Bill.com entities into this model; the sync driver
serializes it with ``to_dict``.

Identifiers:
    entitlement id  "<resource type>:<resource id>:<slug>"
    grant id        "<entitlement id>:<principal type>:<principal id>"

Usage:
    org = new_resource("Acme", ORGANIZATION, "org-1")
    member = new_assignment_entitlement(org, "member", grantable_to=[USER])
    grant = new_grant(org, "member", ResourceId("user", "usr-1"))
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .bill.exceptions import ProfileAttributeMissingError

TRAIT_USER = "user"
TRAIT_ROLE = "role"

PURPOSE_ASSIGNMENT = "assignment"
PURPOSE_PERMISSION = "permission"

USER_STATUS_UNSPECIFIED = "unspecified"
USER_STATUS_ENABLED = "enabled"
USER_STATUS_DISABLED = "disabled"


@dataclass(frozen=True)
class ResourceType:
    id: str
    display_name: str
    traits: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "display_name": self.display_name, "traits": list(self.traits)}


@dataclass(frozen=True)
class ResourceId:
    resource_type: str
    resource: str

    def to_dict(self) -> Dict[str, str]:
        return {"resource_type": self.resource_type, "resource": self.resource}


@dataclass
class UserTrait:
    profile: Dict[str, Any] = field(default_factory=dict)
    status: str = USER_STATUS_UNSPECIFIED
    emails: List[str] = field(default_factory=list)


@dataclass
class RoleTrait:
    profile: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Resource:
    id: ResourceId
    display_name: str
    parent_resource_id: Optional[ResourceId] = None
    user_trait: Optional[UserTrait] = None
    role_trait: Optional[RoleTrait] = None
    child_resource_types: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id.to_dict(),
            "display_name": self.display_name,
            "parent_resource_id": self.parent_resource_id.to_dict() if self.parent_resource_id else None,
        }
        if self.user_trait is not None:
            data["user_trait"] = {
                "profile": dict(self.user_trait.profile),
                "status": self.user_trait.status,
                "emails": list(self.user_trait.emails),
            }
        if self.role_trait is not None:
            data["role_trait"] = {"profile": dict(self.role_trait.profile)}
        if self.child_resource_types:
            data["child_resource_types"] = list(self.child_resource_types)
        return data


@dataclass
class Entitlement:
    id: str
    resource: Resource
    slug: str
    display_name: str = ""
    description: str = ""
    purpose: str = PURPOSE_ASSIGNMENT
    grantable_to: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "resource": self.resource.id.to_dict(),
            "slug": self.slug,
            "display_name": self.display_name,
            "description": self.description,
            "purpose": self.purpose,
            "grantable_to": list(self.grantable_to),
        }


@dataclass
class Grant:
    id: str
    entitlement: Entitlement
    principal: ResourceId

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "entitlement": self.entitlement.id,
            "resource": self.entitlement.resource.id.to_dict(),
            "principal": self.principal.to_dict(),
        }


# ─────────────────────────────────────────────────────────────────────────────
# Builders
# ─────────────────────────────────────────────────────────────────────────────

def new_resource(
    name: str,
    resource_type: ResourceType,
    object_id: Any,
    parent_resource_id: Optional[ResourceId] = None,
    child_resource_types: Sequence[ResourceType] = (),
) -> Resource:
    """Create a plain resource.

    Args:
        name: Display name
        resource_type: Type of the resource
        object_id: Backend id (converted to string)
        parent_resource_id: Owning resource, if any
        child_resource_types: Types the driver should list below this resource

    Returns:
        Resource without traits
    """
    return Resource(
        id=ResourceId(resource_type.id, str(object_id)),
        display_name=name,
        parent_resource_id=parent_resource_id,
        child_resource_types=[child.id for child in child_resource_types],
    )


def new_user_resource(
    name: str,
    resource_type: ResourceType,
    object_id: Any,
    profile: Dict[str, Any],
    status: str = USER_STATUS_UNSPECIFIED,
    emails: Sequence[str] = (),
    parent_resource_id: Optional[ResourceId] = None,
) -> Resource:
    """Create a resource carrying a user trait."""
    resource = new_resource(name, resource_type, object_id, parent_resource_id)
    resource.user_trait = UserTrait(profile=dict(profile), status=status, emails=[e for e in emails if e])
    return resource


def new_role_resource(
    name: str,
    resource_type: ResourceType,
    object_id: Any,
    profile: Dict[str, Any],
    parent_resource_id: Optional[ResourceId] = None,
) -> Resource:
    """Create a resource carrying a role trait."""
    resource = new_resource(name, resource_type, object_id, parent_resource_id)
    resource.role_trait = RoleTrait(profile=dict(profile))
    return resource


def entitlement_id(resource: Resource, slug: str) -> str:
    return f"{resource.id.resource_type}:{resource.id.resource}:{slug}"


def _new_entitlement(
    resource: Resource,
    slug: str,
    purpose: str,
    grantable_to: Sequence[ResourceType],
    display_name: str,
    description: str,
) -> Entitlement:
    return Entitlement(
        id=entitlement_id(resource, slug),
        resource=resource,
        slug=slug,
        display_name=display_name or slug,
        description=description,
        purpose=purpose,
        grantable_to=[rt.id for rt in grantable_to],
    )


def new_assignment_entitlement(
    resource: Resource,
    slug: str,
    grantable_to: Sequence[ResourceType] = (),
    display_name: str = "",
    description: str = "",
) -> Entitlement:
    """Create a membership-style entitlement on ``resource``."""
    return _new_entitlement(resource, slug, PURPOSE_ASSIGNMENT, grantable_to, display_name, description)


def new_permission_entitlement(
    resource: Resource,
    slug: str,
    grantable_to: Sequence[ResourceType] = (),
    display_name: str = "",
    description: str = "",
) -> Entitlement:
    """Create a permission entitlement on ``resource``."""
    return _new_entitlement(resource, slug, PURPOSE_PERMISSION, grantable_to, display_name, description)


def new_grant(resource: Resource, slug: str, principal: ResourceId) -> Grant:
    """Grant the ``slug`` entitlement of ``resource`` to ``principal``."""
    entitlement = Entitlement(id=entitlement_id(resource, slug), resource=resource, slug=slug)
    return Grant(
        id=f"{entitlement.id}:{principal.resource_type}:{principal.resource}",
        entitlement=entitlement,
        principal=principal,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Accessors
# ─────────────────────────────────────────────────────────────────────────────

def get_role_trait(resource: Resource) -> RoleTrait:
    """Return the role trait of ``resource``.

    Raises:
        ProfileAttributeMissingError: If the resource has no role trait
    """
    if resource.role_trait is None:
        raise ProfileAttributeMissingError(f"resource {resource.id.resource!r} has no role trait")
    return resource.role_trait


def get_profile_string_value(profile: Dict[str, Any], key: str) -> Optional[str]:
    """Return ``profile[key]`` when it is a string, else None."""
    value = profile.get(key)
    return value if isinstance(value, str) else None
