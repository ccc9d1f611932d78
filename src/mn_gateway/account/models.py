"""Domain model for accounts — pure dataclass, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Account:
    id: int
    name: str
    email: str
    username: str
    password_hash: str
    created_at: datetime
    updated_at: datetime
