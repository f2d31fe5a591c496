"""
Excepciones de integracion con APIs externas.
"""
from typing import Optional

from tablesync.shared.exceptions.base import AppException


class FetchError(AppException):
    """Fallo al obtener una pagina de datos remota."""
    
    def __init__(self, message: str, status_code: Optional[int] = None, error_code: str = "FETCH_ERROR"):
        super().__init__(
            message=message,
            error_code=error_code,
            details={"status_code": status_code} if status_code is not None else None
        )
        self.status_code = status_code


class NotionApiError(FetchError):
    """Error de integración con Notion."""
    
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, status_code=status_code, error_code="NOTION_API_ERROR")
