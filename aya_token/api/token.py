"""
Token metadata and balance endpoints
"""

from fastapi import APIRouter, Depends

from .auth import TokenSystem, get_token_system


router = APIRouter()


@router.get("/token")
async def get_token_info(system: TokenSystem = Depends(get_token_system)):
    """Token metadata and supply"""
    token = system.token
    return {
        "name": token.name(),
        "symbol": token.symbol(),
        "decimals": token.decimals(),
        "total_supply": token.total_supply(),
        "owner": token.owner(),
        "treasury": token.treasury()
    }


@router.get("/accounts/{account}/balance")
async def get_balance(account: str, system: TokenSystem = Depends(get_token_system)):
    """Balance of an account"""
    return {
        "account": account,
        "balance": system.token.balance_of(account),
        "blacklisted": system.token.get_black_list_status(account)
    }


@router.get("/accounts/{owner}/allowances/{spender}")
async def get_allowance(owner: str, spender: str, system: TokenSystem = Depends(get_token_system)):
    """Remaining allowance owner -> spender"""
    return {
        "owner": owner,
        "spender": spender,
        "allowance": system.token.allowance(owner, spender)
    }
