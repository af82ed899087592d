import os
import sys
import pytest

# Ensure the project root (containing `core`, `services`, `api`) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import models  # noqa: F401
from database import Base, make_engine, make_session_factory
from core.escrow_service import EscrowService
from core.events import EventBus


def addr(n):
    return "0x" + format(n, "040x")


OWNER = addr(1)
ADMIN = addr(2)
ALICE = addr(3)
BOB = addr(4)
CAROL = addr(5)
OWNER2 = addr(6)
NULL = addr(0)
COMMITMENT = "0x" + "ab" * 32


@pytest.fixture()
def engine():
    eng = make_engine("sqlite://")
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def published():
    return []


@pytest.fixture()
def event_bus(published):
    bus = EventBus()
    bus.subscribe(published.append)
    return bus


@pytest.fixture()
def service(session_factory, event_bus):
    svc = EscrowService(session_factory, event_bus=event_bus)
    svc.initialize(OWNER)
    return svc


@pytest.fixture()
def admin_service(service):
    """service with ADMIN already registered as an arbiter"""
    service.add_admin(OWNER, ADMIN)
    return service


@pytest.fixture()
def accepted_game(admin_service):
    """ALICE opens a game with stake 10, BOB accepts it"""
    game_id = admin_service.create_game(ALICE, 10, COMMITMENT)
    admin_service.accept_game(BOB, game_id, 10)
    return game_id
