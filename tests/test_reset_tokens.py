import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from assetdesk.core.reset_tokens import ResetTokenRegistry
from assetdesk.db.blobstore import Collection, MemoryBlobStore

START = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def clock():
    state = {"now": START}

    def now():
        return state["now"]

    now.state = state
    return now


@pytest.fixture()
def blobs():
    return MemoryBlobStore()


@pytest.fixture()
def registry(blobs, clock):
    return ResetTokenRegistry(blobs, clock=clock, ttl_seconds=600)


def test_generate_sets_expiry(registry, blobs):
    issued = registry.generate("ada@example.com")

    assert issued.expires_at == int(START.timestamp() * 1000) + 600_000
    assert blobs.load(Collection.RESET_TOKENS) == [
        {"token": issued.token, "email": "ada@example.com", "expiresAt": issued.expires_at}
    ]


def test_new_token_replaces_previous_for_same_email(registry):
    first = registry.generate("ada@example.com")
    other = registry.generate("grace@example.com")
    second = registry.generate("ada@example.com")

    assert registry.find(first.token) is None
    assert registry.find(second.token) == second
    assert registry.find(other.token) == other


def test_validate_requires_matching_email(registry):
    issued = registry.generate("ada@example.com")

    assert registry.validate(issued.token, "ada@example.com") is True
    assert registry.validate(issued.token, "grace@example.com") is False
    assert registry.validate("unknown", "ada@example.com") is False


def test_validate_at_exact_expiry_still_passes(registry, clock):
    issued = registry.generate("ada@example.com")
    clock.state["now"] = START + timedelta(seconds=600)

    assert registry.validate(issued.token, "ada@example.com") is True


def test_expired_token_is_purged(registry, clock):
    issued = registry.generate("ada@example.com")
    clock.state["now"] = START + timedelta(seconds=601)

    assert registry.validate(issued.token, "ada@example.com") is False
    assert registry.find(issued.token) is None


def test_remove(registry):
    issued = registry.generate("ada@example.com")

    registry.remove(issued.token)

    assert registry.find(issued.token) is None
