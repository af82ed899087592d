import pytest

from core.access_control import AccessControl
from core.escrow_service import EscrowService
from core.exceptions import (
    AlreadyInitialized,
    InvalidAddress,
    NotAdmin,
    Unauthorized,
)
from tests.conftest import ADMIN, ALICE, BOB, NULL, OWNER, OWNER2


def test_initialize_sets_owner(service):
    assert service.owner() == OWNER
    assert service.is_admin(OWNER) is False


def test_initialize_runs_once(service):
    with pytest.raises(AlreadyInitialized):
        service.initialize(ALICE)
    assert service.owner() == OWNER


def test_initialize_rejects_null_owner(session_factory):
    svc = EscrowService(session_factory)
    with pytest.raises(InvalidAddress):
        svc.initialize(NULL)


def test_ensure_initialized_keeps_existing_owner(service):
    service.ensure_initialized(ALICE)
    assert service.owner() == OWNER


def test_ensure_initialized_requires_owner_on_empty_database(session_factory):
    svc = EscrowService(session_factory)
    with pytest.raises(ValueError):
        svc.ensure_initialized(None)


def test_owner_adds_admin(service, published):
    service.add_admin(OWNER, ADMIN)
    assert service.is_admin(ADMIN) is True
    assert published[-1].event_type == "AdminAdded"
    assert published[-1].data == {"admin": ADMIN}


def test_add_admin_is_idempotent_and_reemits(service, published):
    service.add_admin(OWNER, ADMIN)
    service.add_admin(OWNER, ADMIN)
    assert service.is_admin(ADMIN) is True
    assert [e.event_type for e in published] == ["AdminAdded", "AdminAdded"]


def test_add_admin_normalizes_case(service):
    service.add_admin(OWNER, "0x" + "AB" * 20)
    assert service.is_admin("0x" + "ab" * 20) is True


def test_non_owner_cannot_add_admin(service, published):
    with pytest.raises(Unauthorized):
        service.add_admin(ALICE, ADMIN)
    assert service.is_admin(ADMIN) is False
    assert published == []


def test_add_null_admin_rejected(service):
    with pytest.raises(InvalidAddress):
        service.add_admin(OWNER, NULL)


def test_remove_admin(service, published):
    service.add_admin(OWNER, ADMIN)
    service.remove_admin(OWNER, ADMIN)
    assert service.is_admin(ADMIN) is False
    assert published[-1].event_type == "AdminDeleted"


def test_remove_unknown_admin_fails(service):
    with pytest.raises(NotAdmin):
        service.remove_admin(OWNER, ADMIN)


def test_non_owner_cannot_remove_admin(service):
    service.add_admin(OWNER, ADMIN)
    with pytest.raises(Unauthorized):
        service.remove_admin(ADMIN, ADMIN)
    assert service.is_admin(ADMIN) is True


def test_transfer_ownership(service, published):
    service.transfer_ownership(OWNER, OWNER2)
    assert service.owner() == OWNER2

    event = published[-1]
    assert event.event_type == "OwnershipTransferred"
    assert event.data == {"previous_owner": OWNER, "new_owner": OWNER2}

    # new owner manages admins and can transfer further
    service.add_admin(OWNER2, ADMIN)
    service.remove_admin(OWNER2, ADMIN)
    service.transfer_ownership(OWNER2, BOB)
    assert service.owner() == BOB


def test_previous_owner_loses_authority(service):
    service.transfer_ownership(OWNER, OWNER2)
    with pytest.raises(Unauthorized):
        service.add_admin(OWNER, ADMIN)
    with pytest.raises(Unauthorized):
        service.transfer_ownership(OWNER, OWNER)


def test_transfer_to_null_rejected(service):
    with pytest.raises(InvalidAddress):
        service.transfer_ownership(OWNER, NULL)
    assert service.owner() == OWNER


def test_non_owner_cannot_transfer(service):
    with pytest.raises(Unauthorized):
        service.transfer_ownership(ALICE, ALICE)


def test_require_admin_guard(service, db):
    service.add_admin(OWNER, ADMIN)
    AccessControl.require_admin(db, ADMIN)
    with pytest.raises(Unauthorized):
        AccessControl.require_admin(db, OWNER)


def test_is_admin_with_malformed_address(service):
    assert service.is_admin("not-an-address") is False
