"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class TodoPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"
