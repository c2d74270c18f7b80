"""
Blacklist administration endpoints
"""

from fastapi import APIRouter, Depends

from .auth import TokenSystem, get_caller, get_token_system


router = APIRouter()


@router.get("")
async def list_blacklisted(system: TokenSystem = Depends(get_token_system)):
    """All blacklisted accounts"""
    return {"accounts": system.token.black_list()}


@router.get("/{account}")
async def get_black_list_status(account: str, system: TokenSystem = Depends(get_token_system)):
    """Blacklist status of an account"""
    return {"account": account, "blacklisted": system.token.get_black_list_status(account)}


@router.post("/{account}")
async def add_black_list(
    account: str,
    caller: str = Depends(get_caller),
    system: TokenSystem = Depends(get_token_system)
):
    """Blacklist an account (ADMIN)"""
    changed = system.token.add_black_list(caller, account)
    return {"account": account, "blacklisted": True, "changed": changed}


@router.delete("/{account}")
async def remove_black_list(
    account: str,
    caller: str = Depends(get_caller),
    system: TokenSystem = Depends(get_token_system)
):
    """Lift an account from the blacklist (ADMIN)"""
    changed = system.token.remove_black_list(caller, account)
    return {"account": account, "blacklisted": False, "changed": changed}


@router.post("/{account}/destroy-funds")
async def destroy_black_funds(
    account: str,
    caller: str = Depends(get_caller),
    system: TokenSystem = Depends(get_token_system)
):
    """Move a blacklisted balance to the treasury (ADMIN)"""
    amount = system.token.destroy_black_funds(caller, account)
    return {
        "account": account,
        "destroyed": amount,
        "treasury": system.token.treasury(),
        "balance": system.token.balance_of(account)
    }
