"""
Token Ledger Engine

Core bookkeeping for balances, allowances and total supply. Every
value-moving call is two-phase: its legs are planned against an overlay of
the live state, leg i seeing the effects of legs 0..i-1, and only a fully
valid plan is written back. A failing leg therefore leaves every balance and
allowance untouched, and the sum of balances always equals the total supply.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
import uuid

from .audit import AuditEventType, AuditTrail
from .blacklist import BlacklistRegistry
from .errors import (
    AlreadyMinted, InsufficientAllowance, InsufficientBalance, NotBlacklisted,
    validate_amount, validate_lengths
)
from .logging_config import get_logger, log_action
from .storage import StorageInterface


@dataclass(frozen=True)
class TransferLeg:
    """One debit/credit pair of a transfer call"""
    source: str
    destination: str
    amount: int


@dataclass
class LedgerDelta:
    """New values for every balance and allowance a planned call touches"""
    balances: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[Tuple[str, str], int] = field(default_factory=dict)


class TokenLedger:
    """
    Balance and allowance ledger with blacklist-gated outgoing transfers
    """

    def __init__(self, storage: StorageInterface, blacklist: BlacklistRegistry,
                 audit_trail: Optional[AuditTrail] = None):
        self.storage = storage
        self.blacklist = blacklist
        self.audit = audit_trail
        self.balances_table = "balances"
        self.allowances_table = "allowances"
        self.supply_table = "supply"
        self.logger = get_logger("aya.ledger")
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._total_supply = 0
        self._minted = False
        self.load()

    def load(self) -> None:
        """(Re)load ledger state from storage"""
        self._balances = {
            record['account']: record['amount']
            for record in self.storage.load_all(self.balances_table)
        }
        self._allowances = {
            (record['owner'], record['spender']): record['amount']
            for record in self.storage.load_all(self.allowances_table)
        }
        supply = self.storage.load(self.supply_table, "total_supply")
        self._minted = supply is not None
        self._total_supply = supply['amount'] if supply else 0

    # Queries

    @property
    def total_supply(self) -> int:
        return self._total_supply

    @property
    def is_minted(self) -> bool:
        return self._minted

    def balance_of(self, account: str) -> int:
        """Returns the token balance of the given account"""
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        """Returns what spender may still move out of owner's balance"""
        return self._allowances.get((owner, spender), 0)

    def holders(self) -> Dict[str, int]:
        """Accounts with a non-zero balance"""
        return {account: amount for account, amount in self._balances.items() if amount > 0}

    def sum_of_balances(self) -> int:
        return sum(self._balances.values())

    # Genesis

    def mint(self, to: str, amount: int) -> None:
        """
        Credit the whole supply to `to`. Genesis only.

        Raises:
            AlreadyMinted: supply has been minted before
        """
        validate_amount(amount)
        if self._minted:
            raise AlreadyMinted()

        self.storage.save(self.supply_table, "total_supply", {'id': "total_supply", 'amount': amount})
        self._commit(LedgerDelta(balances={to: self.balance_of(to) + amount}))
        self._total_supply = amount
        self._minted = True

        if self.audit:
            self.audit.log_event(
                AuditEventType.TRANSFER, 'account', to,
                {'from': None, 'to': to, 'amount': amount}
            )
        log_action(
            self.logger, "info", "Supply minted",
            action="mint", account=to, amount=amount
        )

    # Transfers

    def transfer(self, source: str, destination: str, amount: int) -> bool:
        """
        Move amount from source to destination.

        Raises:
            AccountBlacklisted: source is blacklisted
            InsufficientBalance: source balance is below amount
        """
        return self._execute([TransferLeg(source, destination, amount)], sender=source)

    def transfer_from(self, spender: str, owner: str, destination: str, amount: int) -> bool:
        """
        Move amount out of owner's balance on spender's allowance, which is
        decremented by exactly amount.

        Raises:
            AccountBlacklisted: owner is blacklisted
            InsufficientAllowance: allowance owner -> spender is below amount
            InsufficientBalance: owner balance is below amount
        """
        return self._execute([TransferLeg(owner, destination, amount)], sender=spender, spender=spender)

    def transfer_batch(self, source: str, destinations: Sequence[str], amounts: Sequence[int]) -> bool:
        """
        Pay every destination its amount out of source, all or nothing.

        Raises:
            ArgumentLengthMismatch: destinations and amounts differ in length
            AccountBlacklisted: source is blacklisted
            InsufficientBalance: some leg exceeds the balance left by the legs before it
        """
        validate_lengths(destinations, amounts)
        self.blacklist.require_not_blacklisted(source)
        legs = [TransferLeg(source, destination, amount)
                for destination, amount in zip(destinations, amounts)]
        return self._execute(legs, sender=source, batch=True)

    def transfer_from_batch(self, spender: str, sources: Sequence[str],
                            destinations: Sequence[str], amounts: Sequence[int]) -> bool:
        """
        Delegated batch: leg i moves amounts[i] from sources[i] to
        destinations[i] on the allowance sources[i] -> spender. All or nothing.

        Raises:
            ArgumentLengthMismatch: the three arrays differ in length
            AccountBlacklisted: some source is blacklisted
            InsufficientAllowance: some leg exceeds its remaining allowance
            InsufficientBalance: some leg exceeds its source's remaining balance
        """
        validate_lengths(sources, destinations, amounts)
        legs = [TransferLeg(source, destination, amount)
                for source, destination, amount in zip(sources, destinations, amounts)]
        return self._execute(legs, sender=spender, spender=spender, batch=True)

    def plan(self, legs: Sequence[TransferLeg], spender: Optional[str] = None) -> LedgerDelta:
        """
        Validate legs in order against live state plus the effects of the
        preceding legs, without writing anything.
        """
        delta = LedgerDelta()
        for leg in legs:
            validate_amount(leg.amount)
            self.blacklist.require_not_blacklisted(leg.source)

            if spender is not None:
                key = (leg.source, spender)
                allowance = delta.allowances.get(key, self.allowance(*key))
                if allowance < leg.amount:
                    raise InsufficientAllowance(leg.source, spender, allowance, leg.amount)
                delta.allowances[key] = allowance - leg.amount

            balance = delta.balances.get(leg.source, self.balance_of(leg.source))
            if balance < leg.amount:
                raise InsufficientBalance(leg.source, balance, leg.amount)
            delta.balances[leg.source] = balance - leg.amount
            delta.balances[leg.destination] = (
                delta.balances.get(leg.destination, self.balance_of(leg.destination)) + leg.amount
            )
        return delta

    def _execute(self, legs: List[TransferLeg], sender: str,
                 spender: Optional[str] = None, batch: bool = False) -> bool:
        delta = self.plan(legs, spender)
        self._commit(delta)

        batch_id = str(uuid.uuid4()) if batch else None
        if self.audit:
            for leg in legs:
                metadata = {'from': leg.source, 'to': leg.destination, 'amount': leg.amount}
                if batch_id:
                    metadata['batch_id'] = batch_id
                self.audit.log_event(AuditEventType.TRANSFER, 'account', leg.source, metadata, sender)
            for (owner, allowance_spender), amount in delta.allowances.items():
                self.audit.log_event(
                    AuditEventType.APPROVAL, 'account', owner,
                    {'owner': owner, 'spender': allowance_spender, 'amount': amount},
                    sender
                )
            if batch_id:
                self.audit.log_event(
                    AuditEventType.BATCH_TRANSFER, 'batch', batch_id,
                    {
                        'legs': len(legs),
                        'total': sum(leg.amount for leg in legs),
                        'accounts': sorted(delta.balances),
                        'delegated': spender is not None
                    },
                    sender
                )

        log_action(
            self.logger, "info",
            f"{'Batch transfer' if batch else 'Transfer'} of {len(legs)} leg(s) completed",
            caller=sender,
            action="transfer_from" if spender is not None else "transfer",
            account=None if batch_id or not legs else legs[0].source,
            spender=spender, batch_id=batch_id,
            legs=len(legs), total=sum(leg.amount for leg in legs)
        )
        return True

    def _commit(self, delta: LedgerDelta) -> None:
        """Write a validated delta to storage, then to memory"""
        for account, amount in delta.balances.items():
            self.storage.save(self.balances_table, account, {'id': account, 'account': account, 'amount': amount})
        for (owner, spender), amount in delta.allowances.items():
            record_id = f"{owner}:{spender}"
            self.storage.save(self.allowances_table, record_id, {
                'id': record_id, 'owner': owner, 'spender': spender, 'amount': amount
            })
        self._balances.update(delta.balances)
        self._allowances.update(delta.allowances)

    # Allowances

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Set the allowance owner -> spender to amount (overwrite)"""
        validate_amount(amount)
        self._set_allowance(owner, spender, amount)
        return True

    def increase_allowance(self, owner: str, spender: str, added: int) -> int:
        """Raise the allowance by added, returning the new allowance"""
        validate_amount(added)
        allowance = self.allowance(owner, spender) + added
        self._set_allowance(owner, spender, allowance)
        return allowance

    def decrease_allowance(self, owner: str, spender: str, subtracted: int) -> int:
        """
        Lower the allowance by subtracted, returning the new allowance

        Raises:
            InsufficientAllowance: allowance would drop below zero
        """
        validate_amount(subtracted)
        current = self.allowance(owner, spender)
        if current < subtracted:
            raise InsufficientAllowance(
                owner, spender, current, subtracted,
                message="ERC20: decreased allowance below zero"
            )
        self._set_allowance(owner, spender, current - subtracted)
        return current - subtracted

    def _set_allowance(self, owner: str, spender: str, amount: int) -> None:
        self._commit(LedgerDelta(allowances={(owner, spender): amount}))
        if self.audit:
            self.audit.log_event(
                AuditEventType.APPROVAL, 'account', owner,
                {'owner': owner, 'spender': spender, 'amount': amount},
                owner
            )
        log_action(
            self.logger, "info", "Allowance set",
            caller=owner, action="approve", account=owner,
            spender=spender, amount=amount
        )

    # Blacklist remediation

    def destroy_black_funds(self, account: str, treasury: str, caller: Optional[str] = None) -> int:
        """
        Zero a blacklisted balance and credit it to the treasury, keeping
        total supply unchanged.

        Returns:
            Amount moved to the treasury

        Raises:
            NotBlacklisted: account is not blacklisted
        """
        if not self.blacklist.is_blacklisted(account):
            raise NotBlacklisted(account)

        amount = self.balance_of(account)
        delta = LedgerDelta(balances={account: 0})
        delta.balances[treasury] = delta.balances.get(treasury, self.balance_of(treasury)) + amount
        self._commit(delta)

        if self.audit:
            self.audit.log_event(
                AuditEventType.BLACK_FUNDS_DESTROYED, 'account', account,
                {'account': account, 'amount': amount, 'treasury': treasury},
                caller
            )
        log_action(
            self.logger, "warning", "Black funds destroyed",
            caller=caller, action="destroy_black_funds", account=account,
            amount=amount, treasury=treasury
        )
        return amount
