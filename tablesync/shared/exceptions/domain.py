"""
Excepciones relacionadas con el esquema de tablas y la decodificacion.
"""
from typing import Any, Optional

from tablesync.shared.exceptions.base import AppException


class SchemaError(AppException):
    """
    Error de esquema: columnas de match ausentes, header desconocido,
    tabla inexistente o argumento enumerado invalido.
    """
    
    def __init__(self, message: str, error_code: str = "SCHEMA_ERROR", details=None):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details
        )


class ValidationError(AppException):
    """Combinacion de argumentos o propiedad no soportada."""
    
    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else None
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details
        )


class DecodeError(AppException):
    """
    Error al decodificar una propiedad individual.

    Nunca se propaga fuera del decoder: se captura por propiedad y su
    `diagnostic` se guarda como valor del campo.
    """
    
    def __init__(self, subject: str, diagnostic: str, raw: Any = None):
        super().__init__(
            message=f"No se pudo decodificar {subject}: {diagnostic}",
            error_code="DECODE_ERROR",
            details={"subject": subject, "raw": repr(raw)}
        )
        self.subject = subject
        self.diagnostic = diagnostic
