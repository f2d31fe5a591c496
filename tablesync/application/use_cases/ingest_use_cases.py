"""
Caso de uso: registrar una pagina de Notion en una tabla.

Flujo:
- Obtiene la pagina desde Notion
- Decodifica las propiedades pedidas (o todas)
- Agrega el id de pagina como columna de identidad
- Hace upsert en la tabla destino por las columnas de match
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from tablesync.application.services.property_decoder import PropertyDecoder
from tablesync.application.services.tabular_store import TabularStore
from tablesync.infrastructure.external.notion.notion_client import NotionClient


@dataclass(frozen=True)
class IngestResult:
    table: str
    record: Dict[str, Any]
    merged: Dict[str, Any]


class IngestNotionPageUseCase:
    """
    Orquesta NotionClient -> PropertyDecoder -> TabularStore para una pagina.
    """

    def __init__(
        self,
        *,
        notion: NotionClient,
        store: TabularStore,
        decoder: Optional[PropertyDecoder] = None,
    ) -> None:
        self._notion = notion
        self._store = store
        self._decoder = decoder or PropertyDecoder()

    def build_record(
        self,
        page: Dict[str, Any],
        *,
        properties: Optional[Sequence[str]] = None,
        resolve_relations: bool = False,
        id_column: str = "Page ID",
    ) -> Dict[str, Any]:
        """Construye el registro plano que se escribira en la tabla."""
        if properties:
            fields = self._decoder.decode(page, properties)
        else:
            fields = self._decoder.decode_all(
                page,
                resolve_relations=resolve_relations,
                relation_fetcher_factory=self._notion.relation_fetcher_factory() if resolve_relations else None,
            )
        record: Dict[str, Any] = {id_column: page.get("id")}
        record.update(fields)
        return record

    def execute(
        self,
        *,
        page_id: str,
        table: str,
        match_columns: Optional[List[str]] = None,
        properties: Optional[Sequence[str]] = None,
        resolve_relations: bool = False,
        position: Optional[str] = None,
        id_column: str = "Page ID",
    ) -> IngestResult:
        page = self._notion.retrieve_page(page_id)
        record = self.build_record(
            page,
            properties=properties,
            resolve_relations=resolve_relations,
            id_column=id_column,
        )
        merged = self._store.upsert(
            table,
            [record],
            match_columns or [id_column],
            position=position,
        )
        logger.info(f"Pagina {page_id} registrada en '{table}' ({len(record)} campos)")
        return IngestResult(table=table, record=record, merged=merged[0])
