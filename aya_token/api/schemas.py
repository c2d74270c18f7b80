"""
Pydantic schemas for API requests and responses
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from ..audit import AuditEvent


class TransferRequest(BaseModel):
    to: str
    amount: int = Field(..., description="Amount in the token's smallest unit")


class BatchTransferRequest(BaseModel):
    destinations: List[str]
    amounts: List[int]


class DelegatedTransferRequest(BaseModel):
    owner: str = Field(..., description="Account whose allowance the caller spends")
    to: str
    amount: int


class DelegatedBatchTransferRequest(BaseModel):
    sources: List[str]
    destinations: List[str]
    amounts: List[int]


class ApprovalRequest(BaseModel):
    spender: str
    amount: int


class RoleGrantRequest(BaseModel):
    account: str


class EventModel(BaseModel):
    id: str
    sequence: int
    event_type: str
    entity_type: str
    entity_id: str
    user_id: Optional[str] = None
    metadata: Dict[str, Any]
    created_at: str
    current_hash: str

    @classmethod
    def from_event(cls, event: AuditEvent) -> 'EventModel':
        return cls(
            id=event.id,
            sequence=event.sequence,
            event_type=event.event_type.value,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            user_id=event.user_id,
            metadata=event.metadata,
            created_at=event.created_at.isoformat(),
            current_hash=event.current_hash
        )
