"""
AYA Token Module

The externally observable token: composes AccessControl, BlacklistRegistry
and TokenLedger behind one call surface. Every call names its caller
explicitly (identity comes from the authentication layer), is serialized
under one lock, has its arguments shape-checked, and commits atomically
through the storage backend.
"""

import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .access_control import ADMIN_ROLE, AccessControl
from .audit import AuditEvent, AuditEventType, AuditTrail
from .blacklist import BlacklistRegistry
from .config import AyaConfig, get_config
from .errors import (
    AlreadyDeployed, AlreadyMinted, EmptyBatch, TokenError, Unauthorized,
    validate_account, validate_amount, validate_lengths
)
from .ledger import TokenLedger
from .logging_config import get_logger, log_action
from .storage import StorageInterface


class AyaToken:
    """
    Fungible token with ADMIN-gated blacklist and black-fund destruction.

    Construct with AyaToken.deploy() for a fresh storage, or AyaToken(storage)
    to reopen a deployed one.
    """

    metadata_table = "token_metadata"

    def __init__(self, storage: StorageInterface, settings: Optional[AyaConfig] = None,
                 audit_trail: Optional[AuditTrail] = None):
        self.storage = storage
        self.settings = settings or get_config()
        if audit_trail is None and self.settings.enable_audit_logging:
            audit_trail = AuditTrail(storage)
        self.audit_trail = audit_trail

        self.access_control = AccessControl(storage, audit_trail)
        self.blacklist = BlacklistRegistry(storage, self.access_control, audit_trail)
        self.ledger = TokenLedger(storage, self.blacklist, audit_trail)

        self.logger = get_logger("aya.token")
        self._lock = threading.RLock()
        self._metadata: Dict[str, Any] = storage.load(self.metadata_table, "token") or {}

    @classmethod
    def deploy(cls, storage: StorageInterface, owner: str,
               initial_supply: Optional[int] = None,
               name: Optional[str] = None, symbol: Optional[str] = None,
               decimals: Optional[int] = None, treasury: Optional[str] = None,
               settings: Optional[AyaConfig] = None) -> 'AyaToken':
        """
        Genesis: record metadata, seed ADMIN to owner and mint the whole
        supply to owner. Unset arguments fall back to configuration.

        Raises:
            AlreadyDeployed: storage already holds a token
        """
        token = cls(storage, settings=settings)
        token._genesis(
            owner=owner,
            initial_supply=token.settings.initial_supply if initial_supply is None else initial_supply,
            name=name or token.settings.token_name,
            symbol=symbol or token.settings.token_symbol,
            decimals=token.settings.token_decimals if decimals is None else decimals,
            treasury=treasury or token.settings.treasury_address or owner
        )
        return token

    def _genesis(self, owner: str, initial_supply: int, name: str, symbol: str,
                 decimals: int, treasury: str) -> None:
        with self._call(owner, "deploy"):
            if self._metadata:
                raise AlreadyDeployed()
            # Checked before any write: a TokenError does not reload memory
            if self.ledger.is_minted:
                raise AlreadyMinted()
            if self.access_control.role_members(ADMIN_ROLE):
                raise Unauthorized(owner, ADMIN_ROLE)
            validate_account(owner, allow_zero=False)
            validate_account(treasury, allow_zero=False)
            validate_amount(initial_supply)
            validate_amount(decimals)

            metadata = {
                'id': "token",
                'name': name,
                'symbol': symbol,
                'decimals': decimals,
                'owner': owner,
                'treasury': treasury,
                'deployed_at': datetime.now(timezone.utc).isoformat()
            }
            self.storage.save(self.metadata_table, "token", metadata)
            if self.audit_trail:
                self.audit_trail.log_event(
                    AuditEventType.TOKEN_DEPLOYED, 'token', symbol,
                    {'name': name, 'symbol': symbol, 'decimals': decimals,
                     'owner': owner, 'treasury': treasury, 'initial_supply': initial_supply},
                    owner
                )
            self.access_control.bootstrap(owner)
            self.ledger.mint(owner, initial_supply)
            self._metadata = metadata

    @contextmanager
    def _call(self, caller: Optional[str], action: str):
        """Serialize one external call and commit it atomically"""
        with self._lock:
            try:
                with self.storage.atomic():
                    yield
            except TokenError as e:
                log_action(
                    self.logger, "warning", f"{action} rejected: {e}",
                    caller=caller, action=action, error=e.code
                )
                raise
            except Exception:
                # Storage was rolled back; memory may be ahead of it
                self.reload()
                raise

    def reload(self) -> None:
        """Reload every component from storage"""
        with self._lock:
            self.access_control.load()
            self.blacklist.load()
            self.ledger.load()
            if self.audit_trail:
                self.audit_trail.load()
            self._metadata = self.storage.load(self.metadata_table, "token") or {}

    def _check_batch(self, length: int) -> None:
        if length == 0 and not self.settings.allow_empty_batches:
            raise EmptyBatch()

    # Metadata

    @property
    def is_deployed(self) -> bool:
        return bool(self._metadata)

    def name(self) -> str:
        return self._metadata.get('name', "")

    def symbol(self) -> str:
        return self._metadata.get('symbol', "")

    def decimals(self) -> int:
        return self._metadata.get('decimals', 0)

    def owner(self) -> Optional[str]:
        return self._metadata.get('owner')

    def treasury(self) -> Optional[str]:
        """Account credited by destroy_black_funds"""
        return self._metadata.get('treasury')

    # Balances

    def total_supply(self) -> int:
        with self._lock:
            return self.ledger.total_supply

    def balance_of(self, account: str) -> int:
        with self._lock:
            return self.ledger.balance_of(account)

    def allowance(self, owner: str, spender: str) -> int:
        with self._lock:
            return self.ledger.allowance(owner, spender)

    # Transfers

    def transfer(self, caller: str, to: str, amount: int) -> bool:
        """Move amount from caller to `to`"""
        with self._call(caller, "transfer"):
            validate_account(caller)
            validate_account(to, allow_zero=False)
            validate_amount(amount)
            self.blacklist.require_not_blacklisted(caller)
            return self.ledger.transfer(caller, to, amount)

    def transfer_from(self, caller: str, owner: str, to: str, amount: int) -> bool:
        """Move amount from owner to `to` on the allowance owner gave caller"""
        with self._call(caller, "transfer_from"):
            validate_account(caller)
            validate_account(owner)
            validate_account(to, allow_zero=False)
            validate_amount(amount)
            return self.ledger.transfer_from(caller, owner, to, amount)

    def transfer_batch(self, caller: str, destinations: Sequence[str], amounts: Sequence[int]) -> bool:
        """Pay every destination its amount out of caller, all or nothing"""
        with self._call(caller, "transfer_batch"):
            validate_account(caller)
            length = validate_lengths(destinations, amounts)
            self._check_batch(length)
            for destination, amount in zip(destinations, amounts):
                validate_account(destination, allow_zero=False)
                validate_amount(amount)
            return self.ledger.transfer_batch(caller, list(destinations), list(amounts))

    def transfer_from_batch(self, caller: str, sources: Sequence[str],
                            destinations: Sequence[str], amounts: Sequence[int]) -> bool:
        """Delegated batch on the allowances each source gave caller"""
        with self._call(caller, "transfer_from_batch"):
            validate_account(caller)
            length = validate_lengths(sources, destinations, amounts)
            self._check_batch(length)
            for source, destination, amount in zip(sources, destinations, amounts):
                validate_account(source)
                validate_account(destination, allow_zero=False)
                validate_amount(amount)
            return self.ledger.transfer_from_batch(caller, list(sources), list(destinations), list(amounts))

    # Allowances

    def approve(self, caller: str, spender: str, amount: int) -> bool:
        """Let spender move up to amount out of caller's balance"""
        with self._call(caller, "approve"):
            validate_account(caller)
            validate_account(spender, allow_zero=False)
            return self.ledger.approve(caller, spender, amount)

    def increase_allowance(self, caller: str, spender: str, added: int) -> int:
        with self._call(caller, "increase_allowance"):
            validate_account(caller)
            validate_account(spender, allow_zero=False)
            return self.ledger.increase_allowance(caller, spender, added)

    def decrease_allowance(self, caller: str, spender: str, subtracted: int) -> int:
        with self._call(caller, "decrease_allowance"):
            validate_account(caller)
            validate_account(spender, allow_zero=False)
            return self.ledger.decrease_allowance(caller, spender, subtracted)

    # Blacklist

    def add_black_list(self, caller: str, account: str) -> bool:
        """Blacklist account (ADMIN only, idempotent)"""
        with self._call(caller, "add_black_list"):
            return self.blacklist.add(caller, account)

    def remove_black_list(self, caller: str, account: str) -> bool:
        """Lift account from the blacklist (ADMIN only, idempotent)"""
        with self._call(caller, "remove_black_list"):
            return self.blacklist.remove(caller, account)

    def get_black_list_status(self, account: str) -> bool:
        with self._lock:
            return self.blacklist.is_blacklisted(account)

    def black_list(self) -> List[str]:
        """All blacklisted accounts, sorted"""
        with self._lock:
            return self.blacklist.blacklisted()

    def destroy_black_funds(self, caller: str, account: str) -> int:
        """
        Zero a blacklisted account's balance, crediting the treasury.
        ADMIN only. Returns the amount moved.
        """
        with self._call(caller, "destroy_black_funds"):
            self.access_control.require_role(ADMIN_ROLE, caller)
            return self.ledger.destroy_black_funds(account, self.treasury(), caller=caller)

    def set_treasury(self, caller: str, account: str) -> None:
        """Designate the account credited by destroy_black_funds (ADMIN only)"""
        with self._call(caller, "set_treasury"):
            self.access_control.require_role(ADMIN_ROLE, caller)
            validate_account(account, allow_zero=False)
            previous = self.treasury()
            metadata = dict(self._metadata, treasury=account)
            self.storage.save(self.metadata_table, "token", metadata)
            if self.audit_trail:
                self.audit_trail.log_event(
                    AuditEventType.TREASURY_CHANGED, 'token', self.symbol(),
                    {'previous': previous, 'treasury': account},
                    caller
                )
            self._metadata = metadata

    # Roles

    def has_role(self, role: str, account: str) -> bool:
        with self._lock:
            return self.access_control.has_role(role, account)

    def get_role_admin(self, role: str) -> str:
        with self._lock:
            return self.access_control.get_role_admin(role)

    def role_members(self, role: str) -> List[str]:
        with self._lock:
            return self.access_control.role_members(role)

    def grant_role(self, caller: str, role: str, account: str) -> bool:
        with self._call(caller, "grant_role"):
            return self.access_control.grant_role(caller, role, account)

    def revoke_role(self, caller: str, role: str, account: str) -> bool:
        with self._call(caller, "revoke_role"):
            return self.access_control.revoke_role(caller, role, account)

    def renounce_role(self, caller: str, role: str, account: str) -> bool:
        with self._call(caller, "renounce_role"):
            return self.access_control.renounce_role(caller, role, account)

    def set_role_admin(self, caller: str, role: str, admin_role: str) -> None:
        with self._call(caller, "set_role_admin"):
            self.access_control.set_role_admin(caller, role, admin_role)

    # Inspection

    def check_invariants(self) -> Dict[str, Any]:
        """Recompute supply conservation"""
        with self._lock:
            balances = self.ledger.sum_of_balances()
            return {
                'valid': balances == self.ledger.total_supply,
                'total_supply': self.ledger.total_supply,
                'sum_of_balances': balances,
                'holders': len(self.ledger.holders()),
                'blacklisted': len(self.blacklist.blacklisted()),
                'admins': len(self.access_control.role_members(ADMIN_ROLE)),
            }

    def events(self, account: Optional[str] = None, limit: Optional[int] = None) -> List[AuditEvent]:
        """Event log, optionally restricted to events touching account"""
        if not self.audit_trail:
            return []
        with self._lock:
            if account is None:
                return self.audit_trail.get_all_events(limit=limit)
            return self.audit_trail.get_events_involving(account, limit=limit)
