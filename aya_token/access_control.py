"""
Access Control Module

Maps role identifiers to the accounts holding them. Every role is
administered by an admin role (ADMIN unless changed), and only holders of
that admin role may grant or revoke it. ADMIN is seeded to the deployer at
genesis and can never be left without a holder.
"""

from typing import Dict, List, Optional, Set

from .audit import AuditEventType, AuditTrail
from .errors import LastAdminRemoval, Unauthorized, validate_account
from .logging_config import get_logger, log_action
from .storage import StorageInterface


ADMIN_ROLE = "ADMIN"


class AccessControl:
    """Role membership registry gated by per-role admin roles"""

    def __init__(self, storage: StorageInterface, audit_trail: Optional[AuditTrail] = None):
        self.storage = storage
        self.audit = audit_trail
        self.members_table = "role_members"
        self.admins_table = "role_admins"
        self.logger = get_logger("aya.access_control")
        self._members: Dict[str, Set[str]] = {}
        self._role_admins: Dict[str, str] = {}
        self.load()

    def load(self) -> None:
        """(Re)load role state from storage"""
        self._members = {}
        for record in self.storage.load_all(self.members_table):
            self._members.setdefault(record['role'], set()).add(record['account'])
        self._role_admins = {
            record['role']: record['admin_role']
            for record in self.storage.load_all(self.admins_table)
        }

    # Queries

    def has_role(self, role: str, account: str) -> bool:
        """Check if account holds role"""
        return account in self._members.get(role, set())

    def get_role_admin(self, role: str) -> str:
        """Role whose holders administer the given role"""
        return self._role_admins.get(role, ADMIN_ROLE)

    def role_members(self, role: str) -> List[str]:
        """Holders of a role, sorted"""
        return sorted(self._members.get(role, set()))

    def roles(self) -> List[str]:
        """Roles with at least one holder"""
        return sorted(role for role, members in self._members.items() if members)

    def require_role(self, role: str, account: str) -> None:
        """Raise Unauthorized unless account holds role"""
        if not self.has_role(role, account):
            raise Unauthorized(account, role)

    # Mutations

    def bootstrap(self, admin: str) -> None:
        """Seed the first ADMIN at genesis"""
        validate_account(admin)
        if self._members.get(ADMIN_ROLE):
            raise Unauthorized(admin, ADMIN_ROLE)
        self._grant(ADMIN_ROLE, admin, sender=admin)

    def grant_role(self, caller: str, role: str, account: str) -> bool:
        """
        Grant role to account.

        Returns:
            True if the account did not hold the role before

        Raises:
            Unauthorized: caller does not hold the role's admin role
        """
        self.require_role(self.get_role_admin(role), caller)
        validate_account(account)
        if self.has_role(role, account):
            return False
        self._grant(role, account, sender=caller)
        return True

    def revoke_role(self, caller: str, role: str, account: str) -> bool:
        """
        Revoke role from account.

        Returns:
            True if the account held the role before

        Raises:
            Unauthorized: caller does not hold the role's admin role
            LastAdminRemoval: account is the only ADMIN
        """
        self.require_role(self.get_role_admin(role), caller)
        if not self.has_role(role, account):
            return False
        self._revoke(role, account, sender=caller)
        return True

    def renounce_role(self, caller: str, role: str, account: str) -> bool:
        """Drop a role the caller holds itself"""
        if account != caller:
            raise Unauthorized(caller, role)
        if not self.has_role(role, account):
            return False
        self._revoke(role, account, sender=caller)
        return True

    def set_role_admin(self, caller: str, role: str, admin_role: str) -> None:
        """Change the role administering another role (ADMIN only)"""
        self.require_role(ADMIN_ROLE, caller)
        previous = self.get_role_admin(role)
        self.storage.save(self.admins_table, role, {'id': role, 'role': role, 'admin_role': admin_role})
        if self.audit:
            self.audit.log_event(
                AuditEventType.ROLE_ADMIN_CHANGED, 'role', role,
                {'previous_admin_role': previous, 'admin_role': admin_role},
                caller
            )
        self._role_admins[role] = admin_role

    def _grant(self, role: str, account: str, sender: str) -> None:
        record_id = f"{role}:{account}"
        self.storage.save(self.members_table, record_id, {'id': record_id, 'role': role, 'account': account})
        if self.audit:
            self.audit.log_event(
                AuditEventType.ROLE_GRANTED, 'role', role,
                {'account': account, 'sender': sender},
                sender
            )
        self._members.setdefault(role, set()).add(account)
        log_action(
            self.logger, "info", f"Role {role} granted",
            caller=sender, action="grant_role", role=role, account=account
        )

    def _revoke(self, role: str, account: str, sender: str) -> None:
        if role == ADMIN_ROLE and self._members.get(ADMIN_ROLE) == {account}:
            raise LastAdminRemoval(account)
        self.storage.delete(self.members_table, f"{role}:{account}")
        if self.audit:
            self.audit.log_event(
                AuditEventType.ROLE_REVOKED, 'role', role,
                {'account': account, 'sender': sender},
                sender
            )
        self._members[role].discard(account)
        log_action(
            self.logger, "info", f"Role {role} revoked",
            caller=sender, action="revoke_role", role=role, account=account
        )
