"""
Test suite for the blacklist registry
"""

import pytest

from aya_token.storage import InMemoryStorage
from aya_token.audit import AuditTrail, AuditEventType
from aya_token.access_control import AccessControl
from aya_token.blacklist import BlacklistRegistry
from aya_token.errors import AccountBlacklisted, Unauthorized


ADMIN = "0xadmin"
ALICE = "0xalice"
BOB = "0xbob"


@pytest.fixture
def storage():
    """Create in-memory storage for tests"""
    return InMemoryStorage()


@pytest.fixture
def audit(storage):
    """Create audit trail for tests"""
    return AuditTrail(storage)


@pytest.fixture
def registry(storage, audit):
    """Blacklist registry administered by ADMIN"""
    acl = AccessControl(storage, audit)
    acl.bootstrap(ADMIN)
    return BlacklistRegistry(storage, acl, audit)


class TestBlacklistRegistry:
    """Test adding and removing blacklisted accounts"""

    def test_add(self, registry):
        """Test that an admin blacklists an account"""
        assert registry.add(ADMIN, ALICE) is True
        assert registry.is_blacklisted(ALICE)
        assert not registry.is_blacklisted(BOB)

    def test_add_twice_is_idempotent(self, registry):
        """Test that re-adding does not error"""
        registry.add(ADMIN, ALICE)
        assert registry.add(ADMIN, ALICE) is False
        assert registry.is_blacklisted(ALICE)
        assert registry.blacklisted() == [ALICE]

    def test_remove(self, registry):
        """Test lifting an account"""
        registry.add(ADMIN, ALICE)
        assert registry.remove(ADMIN, ALICE) is True
        assert not registry.is_blacklisted(ALICE)

    def test_remove_absent_is_idempotent(self, registry):
        """Test removing an account that is not blacklisted"""
        assert registry.remove(ADMIN, BOB) is False

    def test_add_requires_admin(self, registry):
        """Test that non-admins cannot blacklist"""
        with pytest.raises(Unauthorized):
            registry.add(ALICE, BOB)
        assert not registry.is_blacklisted(BOB)

    def test_remove_requires_admin(self, registry):
        """Test that non-admins cannot unfreeze, even themselves"""
        registry.add(ADMIN, ALICE)
        with pytest.raises(Unauthorized):
            registry.remove(ALICE, ALICE)
        assert registry.is_blacklisted(ALICE)

    def test_require_not_blacklisted(self, registry):
        """Test the gate used by transfers"""
        registry.require_not_blacklisted(ALICE)
        registry.add(ADMIN, ALICE)
        with pytest.raises(AccountBlacklisted) as exc_info:
            registry.require_not_blacklisted(ALICE)
        assert str(exc_info.value) == "ERC20Blacklist: address blacklisted"
        assert exc_info.value.code == "AccountBlacklisted"

    def test_events_logged(self, registry, audit):
        """Test that changes are audited once per actual change"""
        registry.add(ADMIN, ALICE)
        registry.add(ADMIN, ALICE)
        registry.remove(ADMIN, ALICE)
        assert len(audit.get_events_by_type(AuditEventType.BLACKLIST_ADDED)) == 1
        assert len(audit.get_events_by_type(AuditEventType.BLACKLIST_REMOVED)) == 1

    def test_reload(self, registry, storage):
        """Test that the blacklist persists"""
        registry.add(ADMIN, ALICE)
        reopened = BlacklistRegistry(storage, registry.access_control)
        assert reopened.is_blacklisted(ALICE)
