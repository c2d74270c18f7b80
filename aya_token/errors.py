"""
Token Errors Module

Typed error taxonomy for every way a token call can be refused, plus the
argument-shape checks shared by the facade and the ledger. All errors are
raised before any state is written.
"""

from typing import Any, Sequence


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class TokenError(ValueError):
    """Base exception for all token errors"""

    @property
    def code(self) -> str:
        """Stable error name used by the HTTP layer"""
        return type(self).__name__


class Unauthorized(TokenError):
    """Caller is missing the role required for the call"""

    def __init__(self, account: str, role: str):
        self.account = account
        self.role = role
        super().__init__(f"AccessControl: account {account} is missing role {role}")


class AccountBlacklisted(TokenError):
    """Source account of a transfer is blacklisted"""

    def __init__(self, account: str):
        self.account = account
        super().__init__("ERC20Blacklist: address blacklisted")


class InsufficientBalance(TokenError):
    """Transfer amount exceeds the source balance"""

    def __init__(self, account: str, balance: int, amount: int):
        self.account = account
        self.balance = balance
        self.amount = amount
        super().__init__("ERC20: transfer amount exceeds balance")


class InsufficientAllowance(TokenError):
    """Delegated amount exceeds the spender's allowance"""

    def __init__(self, owner: str, spender: str, allowance: int, amount: int,
                 message: str = "ERC20: insufficient allowance"):
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.amount = amount
        super().__init__(message)


class ArgumentLengthMismatch(TokenError):
    """Batch argument arrays differ in length"""

    def __init__(self, *lengths: int):
        self.lengths = lengths
        super().__init__("AYA: invalid arguments length")


class NotBlacklisted(TokenError):
    """Black funds can only be destroyed on a blacklisted account"""

    def __init__(self, account: str):
        self.account = account
        super().__init__(f"ERC20Blacklist: address {account} is not blacklisted")


class InvalidAmount(TokenError):
    """Amount is not a non-negative integer"""


class InvalidAccount(TokenError):
    """Account identifier is empty or the zero address"""


class EmptyBatch(TokenError):
    """Batch call without legs while empty batches are disabled"""

    def __init__(self):
        super().__init__("AYA: empty batch")


class LastAdminRemoval(TokenError):
    """Removing the role would leave the token without an administrator"""

    def __init__(self, account: str):
        self.account = account
        super().__init__(f"AccessControl: cannot remove last admin {account}")


class AlreadyMinted(TokenError):
    """Supply is minted once at genesis"""

    def __init__(self):
        super().__init__("AYA: supply already minted")


class AlreadyDeployed(TokenError):
    """Storage already holds a deployed token"""

    def __init__(self):
        super().__init__("AYA: token already deployed")


def validate_amount(amount: Any) -> int:
    """Require a non-negative integer amount"""
    # bool is an int subclass
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"AYA: amount must be an integer, got {amount!r}")
    if amount < 0:
        raise InvalidAmount(f"AYA: amount must be non-negative, got {amount}")
    return amount


def validate_account(account: Any, allow_zero: bool = True) -> str:
    """Require a non-empty account identifier"""
    if not isinstance(account, str) or not account.strip():
        raise InvalidAccount(f"AYA: invalid account {account!r}")
    if not allow_zero and account == ZERO_ADDRESS:
        raise InvalidAccount("ERC20: zero address")
    return account


def validate_lengths(*arrays: Sequence[Any]) -> int:
    """Require batch argument arrays of equal length, returning that length"""
    lengths = [len(array) for array in arrays]
    if len(set(lengths)) > 1:
        raise ArgumentLengthMismatch(*lengths)
    return lengths[0] if lengths else 0
