"""
Transfer and approval endpoints
"""

from fastapi import APIRouter, Depends

from .auth import TokenSystem, get_caller, get_token_system
from .schemas import (
    ApprovalRequest, BatchTransferRequest, DelegatedBatchTransferRequest,
    DelegatedTransferRequest, TransferRequest
)


router = APIRouter()


@router.post("/transfers")
async def transfer(
    request: TransferRequest,
    caller: str = Depends(get_caller),
    system: TokenSystem = Depends(get_token_system)
):
    """Transfer from the caller"""
    system.token.transfer(caller, request.to, request.amount)
    return {
        "success": True,
        "from": caller,
        "to": request.to,
        "amount": request.amount
    }


@router.post("/transfers/batch")
async def transfer_batch(
    request: BatchTransferRequest,
    caller: str = Depends(get_caller),
    system: TokenSystem = Depends(get_token_system)
):
    """Batch transfer from the caller, all or nothing"""
    system.token.transfer_batch(caller, request.destinations, request.amounts)
    return {
        "success": True,
        "from": caller,
        "legs": len(request.destinations),
        "total": sum(request.amounts)
    }


@router.post("/transfers/delegated")
async def transfer_from(
    request: DelegatedTransferRequest,
    caller: str = Depends(get_caller),
    system: TokenSystem = Depends(get_token_system)
):
    """Transfer out of owner on the caller's allowance"""
    system.token.transfer_from(caller, request.owner, request.to, request.amount)
    return {
        "success": True,
        "from": request.owner,
        "to": request.to,
        "amount": request.amount,
        "remaining_allowance": system.token.allowance(request.owner, caller)
    }


@router.post("/transfers/delegated/batch")
async def transfer_from_batch(
    request: DelegatedBatchTransferRequest,
    caller: str = Depends(get_caller),
    system: TokenSystem = Depends(get_token_system)
):
    """Delegated batch transfer, all or nothing"""
    system.token.transfer_from_batch(caller, request.sources, request.destinations, request.amounts)
    return {
        "success": True,
        "legs": len(request.sources),
        "total": sum(request.amounts)
    }


@router.post("/approvals")
async def approve(
    request: ApprovalRequest,
    caller: str = Depends(get_caller),
    system: TokenSystem = Depends(get_token_system)
):
    """Set the caller's allowance for spender"""
    system.token.approve(caller, request.spender, request.amount)
    return {
        "success": True,
        "owner": caller,
        "spender": request.spender,
        "allowance": system.token.allowance(caller, request.spender)
    }
