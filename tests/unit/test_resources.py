import pytest

from bill_connector.core.bill import ProfileAttributeMissingError
from bill_connector.core.resources import (
    PURPOSE_ASSIGNMENT,
    PURPOSE_PERMISSION,
    USER_STATUS_ENABLED,
    ResourceId,
    get_profile_string_value,
    get_role_trait,
    new_assignment_entitlement,
    new_grant,
    new_permission_entitlement,
    new_resource,
    new_role_resource,
    new_user_resource,
)
from bill_connector.core.syncers import ORGANIZATION, ROLE, USER


def test_new_resource_converts_id_and_children():
    org = new_resource("Acme", ORGANIZATION, 42, child_resource_types=(USER, ROLE))

    assert org.id == ResourceId("organization", "42")
    assert org.to_dict() == {
        "id": {"resource_type": "organization", "resource": "42"},
        "display_name": "Acme",
        "parent_resource_id": None,
        "child_resource_types": ["user", "role"],
    }


def test_user_resource_drops_empty_emails():
    parent = ResourceId("organization", "org-1")
    user = new_user_resource(
        "Ada", USER, "u1", {"login": "ada"}, status=USER_STATUS_ENABLED, emails=["", "ada@example.com"],
        parent_resource_id=parent,
    )

    data = user.to_dict()
    assert data["user_trait"] == {"profile": {"login": "ada"}, "status": "enabled", "emails": ["ada@example.com"]}
    assert data["parent_resource_id"] == {"resource_type": "organization", "resource": "org-1"}
    assert "role_trait" not in data


def test_entitlement_and_grant_ids():
    org = new_resource("Acme", ORGANIZATION, "org-1")
    member = new_assignment_entitlement(org, "member", grantable_to=[USER], display_name="Acme Org member")
    perm = new_permission_entitlement(org, "Administrator", grantable_to=[USER])
    grant = new_grant(org, "member", ResourceId("user", "u1"))

    assert member.id == "organization:org-1:member"
    assert member.purpose == PURPOSE_ASSIGNMENT
    assert member.grantable_to == ["user"]
    assert perm.purpose == PURPOSE_PERMISSION
    assert perm.display_name == "Administrator"
    assert grant.id == "organization:org-1:member:user:u1"
    assert grant.to_dict() == {
        "id": "organization:org-1:member:user:u1",
        "entitlement": "organization:org-1:member",
        "resource": {"resource_type": "organization", "resource": "org-1"},
        "principal": {"resource_type": "user", "resource": "u1"},
    }


def test_get_role_trait():
    role = new_role_resource("Admin", ROLE, "r1", {"role_id": "r1"})
    assert get_role_trait(role).profile == {"role_id": "r1"}

    with pytest.raises(ProfileAttributeMissingError):
        get_role_trait(new_resource("Acme", ORGANIZATION, "org-1"))


def test_get_profile_string_value():
    profile = {"role_id": "r1", "count": 3}

    assert get_profile_string_value(profile, "role_id") == "r1"
    assert get_profile_string_value(profile, "count") is None
    assert get_profile_string_value(profile, "missing") is None
