"""
Audit trail endpoints
"""

from typing import Optional
from fastapi import APIRouter, Depends

from .auth import TokenSystem, get_token_system
from .schemas import EventModel


router = APIRouter()


@router.get("/events")
async def list_events(
    account: Optional[str] = None,
    limit: Optional[int] = 100,
    system: TokenSystem = Depends(get_token_system)
):
    """Event log, optionally for one account"""
    events = system.token.events(account=account, limit=limit)
    return {"events": [EventModel.from_event(event).model_dump() for event in events]}


@router.get("/verify")
async def verify_audit_chain(system: TokenSystem = Depends(get_token_system)):
    """Verify the audit hash chain and supply conservation"""
    if system.token.audit_trail is None:
        integrity = {"valid": True, "total_events": 0, "hash_errors": [], "chain_breaks": []}
    else:
        integrity = system.token.audit_trail.verify_integrity()
    return {
        "audit": integrity,
        "invariants": system.token.check_invariants()
    }
