"""
Role administration endpoints
"""

from fastapi import APIRouter, Depends

from .auth import TokenSystem, get_caller, get_token_system
from .schemas import RoleGrantRequest


router = APIRouter()


@router.get("/{role}/members")
async def list_role_members(role: str, system: TokenSystem = Depends(get_token_system)):
    """Holders of a role"""
    return {
        "role": role,
        "admin_role": system.token.get_role_admin(role),
        "members": system.token.role_members(role)
    }


@router.get("/{role}/members/{account}")
async def has_role(role: str, account: str, system: TokenSystem = Depends(get_token_system)):
    """Whether account holds role"""
    return {"role": role, "account": account, "has_role": system.token.has_role(role, account)}


@router.post("/{role}/members")
async def grant_role(
    role: str,
    request: RoleGrantRequest,
    caller: str = Depends(get_caller),
    system: TokenSystem = Depends(get_token_system)
):
    """Grant role (caller must hold the role's admin role)"""
    changed = system.token.grant_role(caller, role, request.account)
    return {"role": role, "account": request.account, "has_role": True, "changed": changed}


@router.delete("/{role}/members/{account}")
async def revoke_role(
    role: str,
    account: str,
    caller: str = Depends(get_caller),
    system: TokenSystem = Depends(get_token_system)
):
    """Revoke role, or renounce it when the caller names itself"""
    if account == caller:
        changed = system.token.renounce_role(caller, role, account)
    else:
        changed = system.token.revoke_role(caller, role, account)
    return {"role": role, "account": account, "has_role": False, "changed": changed}
