"""
Blacklist Registry Module

Set of accounts barred from being the source of any value transfer.
Blacklisted accounts may still receive value. Membership only changes
through ADMIN-authorized calls.
"""

from datetime import datetime, timezone
from typing import List, Optional, Set

from .access_control import ADMIN_ROLE, AccessControl
from .audit import AuditEventType, AuditTrail
from .errors import AccountBlacklisted, validate_account
from .logging_config import get_logger, log_action
from .storage import StorageInterface


class BlacklistRegistry:
    """ADMIN-gated registry of frozen accounts"""

    def __init__(self, storage: StorageInterface, access_control: AccessControl,
                 audit_trail: Optional[AuditTrail] = None):
        self.storage = storage
        self.access_control = access_control
        self.audit = audit_trail
        self.table_name = "blacklist"
        self.logger = get_logger("aya.blacklist")
        self._accounts: Set[str] = set()
        self.load()

    def load(self) -> None:
        """(Re)load the blacklist from storage"""
        self._accounts = {record['account'] for record in self.storage.load_all(self.table_name)}

    def is_blacklisted(self, account: str) -> bool:
        """Check if account is blacklisted"""
        return account in self._accounts

    def blacklisted(self) -> List[str]:
        """All blacklisted accounts, sorted"""
        return sorted(self._accounts)

    def require_not_blacklisted(self, account: str) -> None:
        """Raise AccountBlacklisted if account is frozen"""
        if account in self._accounts:
            raise AccountBlacklisted(account)

    def add(self, caller: str, account: str) -> bool:
        """
        Blacklist an account. Idempotent.

        Returns:
            True if the account was not blacklisted before
        """
        self.access_control.require_role(ADMIN_ROLE, caller)
        validate_account(account)
        if account in self._accounts:
            return False

        self.storage.save(self.table_name, account, {
            'id': account,
            'account': account,
            'added_by': caller,
            'added_at': datetime.now(timezone.utc).isoformat()
        })
        if self.audit:
            self.audit.log_event(
                AuditEventType.BLACKLIST_ADDED, 'account', account, {}, caller
            )
        self._accounts.add(account)

        log_action(
            self.logger, "warning", "Account blacklisted",
            caller=caller, action="add_black_list", account=account
        )
        return True

    def remove(self, caller: str, account: str) -> bool:
        """
        Remove an account from the blacklist. Idempotent.

        Returns:
            True if the account was blacklisted before
        """
        self.access_control.require_role(ADMIN_ROLE, caller)
        if account not in self._accounts:
            return False

        self.storage.delete(self.table_name, account)
        if self.audit:
            self.audit.log_event(
                AuditEventType.BLACKLIST_REMOVED, 'account', account, {}, caller
            )
        self._accounts.discard(account)

        log_action(
            self.logger, "info", "Account removed from blacklist",
            caller=caller, action="remove_black_list", account=account
        )
        return True
