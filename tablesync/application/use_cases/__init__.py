"""
Casos de uso de ingesta.
"""
from tablesync.application.use_cases.ingest_use_cases import IngestNotionPageUseCase, IngestResult

__all__ = ["IngestNotionPageUseCase", "IngestResult"]
