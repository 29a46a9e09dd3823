"""
Testes unitários para validação de identificadores.
"""

import pytest

from library_holds.core.validation import (
    MAX_ID_LENGTH,
    validate_item_id,
    validate_record_id,
    validate_user_id,
)


class TestValidateUserId:
    """Testes para validate_user_id."""

    @pytest.mark.parametrize("user_id", ["user_1", "abc-123", "A", "x" * MAX_ID_LENGTH])
    def test_accepts_valid_ids(self, user_id):
        assert validate_user_id(user_id).valid

    @pytest.mark.parametrize("user_id", [None, "", 42, ["u1"]])
    def test_rejects_non_string_or_empty(self, user_id):
        result = validate_user_id(user_id)
        assert not result.valid
        assert "não vazio" in result.error

    def test_rejects_whitespace_only(self):
        result = validate_user_id("   ")
        assert not result.valid
        assert "espaços" in result.error

    def test_rejects_too_long(self):
        result = validate_user_id("x" * (MAX_ID_LENGTH + 1))
        assert not result.valid
        assert str(MAX_ID_LENGTH) in result.error

    @pytest.mark.parametrize("user_id", [
        "user 1", "user:1", "usér", "a/b", "u1;drop", "user_1\n", "\nuser_1",
    ])
    def test_rejects_invalid_characters(self, user_id):
        result = validate_user_id(user_id)
        assert not result.valid
        assert "caracteres inválidos" in result.error

    def test_result_is_falsy_when_invalid(self):
        assert not validate_user_id("")
        assert validate_user_id("ok")


class TestValidateItemId:
    """Testes para validate_item_id."""

    @pytest.mark.parametrize("item_id", ["BK-1001", "isbn:9780000000000", "item_2"])
    def test_accepts_valid_ids(self, item_id):
        assert validate_item_id(item_id).valid

    @pytest.mark.parametrize("item_id", ["BK 1", "BK/1", "BK.1", "BK-1\n", "BK-1\r\n"])
    def test_rejects_invalid_characters(self, item_id):
        assert not validate_item_id(item_id).valid

    def test_rejects_too_long(self):
        assert not validate_item_id("B" * (MAX_ID_LENGTH + 1)).valid


class TestValidateRecordId:
    """Testes para validate_record_id."""

    def test_accepts_any_non_empty_string(self):
        assert validate_record_id("qualquer-coisa", "ID do hold").valid

    @pytest.mark.parametrize("record_id", [None, "", "   ", 10])
    def test_rejects_empty(self, record_id):
        result = validate_record_id(record_id, "ID do hold")
        assert not result.valid
        assert result.error.startswith("ID do hold")
