"""Message domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4


@dataclass
class Message:
    """Domain entity for a group message as stored (ciphertext only)."""

    group_id: UUID
    sender_id: UUID
    encrypted_content: str
    iv: str
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class DecryptedMessage:
    """A message with its body decrypted for a member."""

    id: UUID
    group_id: UUID
    sender_id: UUID
    content: str
    created_at: datetime
