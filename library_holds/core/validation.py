"""
Validação de identificadores.

Checagens puras e síncronas, executadas antes de qualquer outra regra.
Uma falha aqui encerra a requisição sem tocar em cache ou banco.
"""

import re
from dataclasses import dataclass

MAX_ID_LENGTH = 100

USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
# Itens aceitam ":" para identificadores compostos (ex: "BK-1001", "isbn:978...")
ITEM_ID_PATTERN = re.compile(r"^[A-Za-z0-9_:-]+$")


@dataclass(frozen=True)
class ValidationResult:
    """Veredito de validação com motivo legível."""
    valid: bool
    error: str | None = None

    def __bool__(self) -> bool:
        return self.valid


VALID = ValidationResult(valid=True)


def _validate_identifier(
    value: object,
    label: str,
    pattern: re.Pattern,
    charset_error: str,
) -> ValidationResult:
    if not value or not isinstance(value, str):
        return ValidationResult(False, f"{label} deve ser um texto não vazio")
    if not value.strip():
        return ValidationResult(False, f"{label} não pode ser vazio ou só espaços")
    if len(value) > MAX_ID_LENGTH:
        return ValidationResult(
            False,
            f"{label} é longo demais (máximo {MAX_ID_LENGTH} caracteres)",
        )
    if not pattern.fullmatch(value):
        return ValidationResult(False, charset_error)
    return VALID


def validate_user_id(user_id: object) -> ValidationResult:
    """Valida o identificador de usuário (alfanumérico, hífen e underscore)."""
    return _validate_identifier(
        user_id,
        "ID do usuário",
        USER_ID_PATTERN,
        "ID do usuário contém caracteres inválidos "
        "(apenas letras, números, hífen e underscore)",
    )


def validate_item_id(item_id: object) -> ValidationResult:
    """Valida o identificador de item (também aceita dois-pontos)."""
    return _validate_identifier(
        item_id,
        "ID do item",
        ITEM_ID_PATTERN,
        "ID do item contém caracteres inválidos",
    )


def validate_record_id(record_id: object, label: str) -> ValidationResult:
    """Valida IDs de hold/reserva: apenas texto não vazio."""
    if not record_id or not isinstance(record_id, str) or not record_id.strip():
        return ValidationResult(False, f"{label} deve ser um texto não vazio")
    return VALID
