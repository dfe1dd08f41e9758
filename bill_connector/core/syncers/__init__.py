"""Resource syncers projecting Bill.com entities into the generic model.

- organizations.py: organizations, membership/role entitlements, user grants
- users.py: users (per organization)
- roles.py: user role profiles, permission entitlements, role membership grants
"""
from .base import ResourceSyncer
from .helpers import MEMBER, ORGANIZATION, RESOURCES_PAGE_SIZE, ROLE, USER
from .organizations import OrganizationSyncer, organization_resource
from .roles import RoleSyncer, role_resource
from .users import UserSyncer, user_resource

__all__ = [
    "ResourceSyncer",
    "OrganizationSyncer",
    "UserSyncer",
    "RoleSyncer",
    "organization_resource",
    "user_resource",
    "role_resource",
    "ORGANIZATION",
    "USER",
    "ROLE",
    "MEMBER",
    "RESOURCES_PAGE_SIZE",
]
