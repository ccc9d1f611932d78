"""Tests for mn_common.enums — all enum values must match DB CHECK constraints."""

from src.mn_common.enums import TodoPriority, TokenType


class TestAllEnumsAreStr:
    """All enums inherit from (str, Enum) for JSON serialization."""

    def test_todo_priority_is_str(self) -> None:
        assert isinstance(TodoPriority.HIGH, str)
        assert TodoPriority.HIGH == "high"

    def test_token_type_is_str(self) -> None:
        assert isinstance(TokenType.REFRESH, str)
        assert TokenType.REFRESH == "refresh"


class TestEnumValues:
    def test_todo_priority_values(self) -> None:
        # ck_todos_priority in 004_create_todos
        assert {p.value for p in TodoPriority} == {"low", "medium", "high"}

    def test_token_type_values(self) -> None:
        assert {t.value for t in TokenType} == {"access", "refresh"}
