"""
Audit Trail Module

Hash-chained immutable audit log with SHA-256 for tamper detection.
Every state change of the token is logged here; the trail doubles as the
token's event log (Transfer, Approval, blacklist and role events).
"""

import hashlib
import json
import threading
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Dict, List, Optional, Any
from enum import Enum
import uuid

from .storage import StorageInterface, StorageRecord


class AuditEventType(Enum):
    """Types of audit events"""
    # Genesis
    TOKEN_DEPLOYED = "token_deployed"
    TREASURY_CHANGED = "treasury_changed"

    # Ledger events
    TRANSFER = "transfer"
    APPROVAL = "approval"
    BATCH_TRANSFER = "batch_transfer"
    BLACK_FUNDS_DESTROYED = "black_funds_destroyed"

    # Blacklist events
    BLACKLIST_ADDED = "blacklist_added"
    BLACKLIST_REMOVED = "blacklist_removed"

    # Access control events
    ROLE_GRANTED = "role_granted"
    ROLE_REVOKED = "role_revoked"
    ROLE_ADMIN_CHANGED = "role_admin_changed"


@dataclass
class AuditEvent(StorageRecord):
    """
    Immutable audit event with hash chaining for tamper detection
    """
    sequence: int
    event_type: AuditEventType
    entity_type: str  # account, role, token
    entity_id: str
    previous_hash: str
    current_hash: str
    metadata: Dict[str, Any]
    user_id: Optional[str] = None  # Caller that initiated the change

    def calculate_hash(self) -> str:
        """
        Calculate SHA-256 hash of this event
        Hash includes all fields except current_hash to prevent circular reference
        """
        hash_data = {
            'id': self.id,
            'sequence': self.sequence,
            'created_at': self.created_at.isoformat(),
            'event_type': self.event_type.value,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'previous_hash': self.previous_hash,
            'user_id': self.user_id,
            'metadata': self.metadata
        }

        json_data = json.dumps(hash_data, sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(json_data.encode('utf-8')).hexdigest()

    def verify_hash(self) -> bool:
        """Verify that the current hash is correct"""
        return self.current_hash == self.calculate_hash()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage with proper enum serialization"""
        result = super().to_dict()
        result['event_type'] = self.event_type.value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuditEvent':
        """Create AuditEvent from dictionary with proper enum deserialization"""
        if isinstance(data['created_at'], str):
            data['created_at'] = datetime.fromisoformat(data['created_at'])
        if isinstance(data['updated_at'], str):
            data['updated_at'] = datetime.fromisoformat(data['updated_at'])
        if isinstance(data['event_type'], str):
            data['event_type'] = AuditEventType(data['event_type'])

        return cls(**data)


class AuditTrail:
    """
    Hash-chained audit trail for tamper detection
    """

    def __init__(self, storage: StorageInterface, table_name: str = "audit_events"):
        self.storage = storage
        self.table_name = table_name
        self._last_hash: Optional[str] = None
        self._last_sequence = 0
        self._lock = threading.Lock()
        self.load()

    def load(self) -> None:
        """
        Read the chain head (hash and sequence of the latest event) from
        storage. Needed again only after storage has been rolled back.
        """
        events = self.storage.load_all(self.table_name)
        if events:
            latest = max(events, key=lambda x: x.get('sequence', 0))
            self._last_hash = latest.get('current_hash')
            self._last_sequence = latest.get('sequence', 0)
        else:
            self._last_hash = None
            self._last_sequence = 0

    def log_event(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: str,
        metadata: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None
    ) -> AuditEvent:
        """
        Log an audit event with hash chaining

        Args:
            event_type: Type of audit event
            entity_type: Type of entity being audited
            entity_id: ID of the entity
            metadata: Additional event-specific data (JSON-serializable)
            user_id: Caller who initiated the action

        Returns:
            Created AuditEvent
        """
        with self._lock:
            now = datetime.now(timezone.utc)

            event = AuditEvent(
                id=str(uuid.uuid4()),
                created_at=now,
                updated_at=now,
                sequence=self._last_sequence + 1,
                event_type=event_type,
                entity_type=entity_type,
                entity_id=entity_id,
                previous_hash=self._last_hash or "",
                current_hash="",
                metadata=metadata or {},
                user_id=user_id
            )
            event.current_hash = event.calculate_hash()

            self.storage.save(self.table_name, event.id, event.to_dict())

            self._last_hash = event.current_hash
            self._last_sequence = event.sequence

            return event

    def _load_events(self, filters: Optional[Dict[str, Any]] = None) -> List[AuditEvent]:
        events_data = self.storage.find(self.table_name, filters or {})
        events = [AuditEvent.from_dict(data) for data in events_data]
        events.sort(key=lambda x: x.sequence)
        return events

    def get_events_for_entity(
        self,
        entity_type: str,
        entity_id: str,
        limit: Optional[int] = None
    ) -> List[AuditEvent]:
        """
        Get all audit events for a specific entity

        Args:
            entity_type: Type of entity
            entity_id: ID of entity
            limit: Maximum number of events to return

        Returns:
            List of AuditEvent objects in chain order
        """
        events = self._load_events({'entity_type': entity_type, 'entity_id': entity_id})
        if limit:
            events = events[-limit:]
        return events

    def get_events_by_type(
        self,
        event_type: AuditEventType,
        limit: Optional[int] = None
    ) -> List[AuditEvent]:
        """Get audit events of one type in chain order"""
        events = self._load_events({'event_type': event_type.value})
        if limit:
            events = events[-limit:]
        return events

    def get_all_events(self, limit: Optional[int] = None) -> List[AuditEvent]:
        """Get all audit events in chain order"""
        events = self._load_events()
        if limit:
            events = events[-limit:]
        return events

    def get_events_involving(self, account: str, limit: Optional[int] = None) -> List[AuditEvent]:
        """
        Get events that touch an account, either as the audited entity or
        as a party named in the event metadata (from, to, owner, spender)
        """
        parties = ('from', 'to', 'owner', 'spender', 'account', 'treasury')
        events = [
            event for event in self._load_events()
            if event.entity_id == account
            or account in (event.metadata.get(key) for key in parties)
            or account in event.metadata.get('accounts', [])
        ]
        if limit:
            events = events[-limit:]
        return events

    def verify_integrity(self) -> Dict[str, Any]:
        """
        Verify the integrity of the entire audit chain

        Returns:
            Dictionary with integrity check results
        """
        result = {
            'valid': True,
            'total_events': 0,
            'hash_errors': [],
            'chain_breaks': [],
        }

        events = self._load_events()
        result['total_events'] = len(events)

        previous_hash = ""
        for position, event in enumerate(events):
            if not event.verify_hash():
                result['valid'] = False
                result['hash_errors'].append({
                    'event_id': event.id,
                    'position': position,
                    'expected_hash': event.calculate_hash(),
                    'actual_hash': event.current_hash
                })
            if event.previous_hash != previous_hash:
                result['valid'] = False
                result['chain_breaks'].append({
                    'event_id': event.id,
                    'position': position,
                    'expected_previous_hash': previous_hash,
                    'actual_previous_hash': event.previous_hash
                })
            previous_hash = event.current_hash

        return result

    def get_latest_hash(self) -> Optional[str]:
        """Get the hash of the most recent audit event"""
        return self._last_hash
