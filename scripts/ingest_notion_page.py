"""
CLI: pagina de Notion -> tabla (upsert).

Uso recomendado:
  - Ejecutar desde un job o un receptor de webhooks externo.
  - Con STORAGE_BACKEND=postgres toma un advisory lock por tabla: un solo
    escritor por tabla a la vez.

Variables de entorno requeridas:
  - NOTION_TOKEN
  - DATABASE_URL (si STORAGE_BACKEND=postgres)

Ejecución:
  python scripts/ingest_notion_page.py --page-id <id> --table Forms
  python scripts/ingest_notion_page.py --page-id <id> --table Forms --match URI --position top
  python scripts/ingest_notion_page.py --page-id <id> --table Forms --properties Name Status
  python scripts/ingest_notion_page.py --schema-only
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

# Permite ejecutar este script sin instalar el paquete.
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

load_dotenv(_REPO_ROOT / ".env", override=False)

from tablesync.application.services.tabular_store import build_tabular_store
from tablesync.application.use_cases.ingest_use_cases import IngestNotionPageUseCase
from tablesync.core.config import get_settings
from tablesync.core.logging import configure_logging
from tablesync.infrastructure.external.notion.notion_client import NotionClient
from tablesync.shared.exceptions.base import AppException


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Registra una pagina de Notion en una tabla.")
    parser.add_argument("--page-id", help="Id de la pagina de Notion.")
    parser.add_argument("--table", help="Nombre de la tabla destino.")
    parser.add_argument(
        "--match",
        nargs="+",
        default=None,
        help="Columnas de match para el upsert (por defecto la columna de id).",
    )
    parser.add_argument("--position", choices=["top", "bottom"], default=None)
    parser.add_argument(
        "--properties",
        nargs="+",
        default=None,
        help="Subconjunto de propiedades a decodificar (por defecto todas).",
    )
    parser.add_argument(
        "--resolve-relations",
        action="store_true",
        help="Resuelve relaciones paginando la API (solo sin --properties).",
    )
    parser.add_argument("--id-column", default="Page ID")
    parser.add_argument(
        "--schema-only",
        action="store_true",
        help="Solo imprime el DDL del backend Postgres (no ejecuta ingesta).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    if args.schema_only:
        from tablesync.infrastructure.storage.pg_backend import STORAGE_DDL

        print(STORAGE_DDL)
        return 0

    if not args.page_id or not args.table:
        raise SystemExit("--page-id y --table son obligatorios")

    notion = NotionClient.from_settings(settings)
    run_kwargs = dict(
        page_id=args.page_id,
        table=args.table,
        match_columns=args.match,
        properties=args.properties,
        resolve_relations=args.resolve_relations,
        position=args.position,
        id_column=args.id_column,
    )

    if not settings.uses_postgres:
        store = build_tabular_store(settings)
        result = IngestNotionPageUseCase(notion=notion, store=store).execute(**run_kwargs)
        logger.info(f"Ingesta OK (memoria): {result.merged}")
        return 0

    from tablesync.infrastructure.storage.pg_backend import PostgresTableBackend, connect, stable_lock_key

    with connect(settings.DATABASE_URL) as conn:
        backend = PostgresTableBackend(conn, default_row_height=settings.DEFAULT_ROW_HEIGHT)
        backend.ensure_storage()
        conn.commit()

        if not backend.try_advisory_lock(stable_lock_key("tablesync", args.table)):
            logger.warning(f"Otro escritor tiene la tabla '{args.table}' (advisory lock ocupado). Saliendo.")
            return 1

        store = build_tabular_store(settings, backend=backend)
        try:
            result = IngestNotionPageUseCase(notion=notion, store=store).execute(**run_kwargs)
            conn.commit()
        except AppException as e:
            # Las escrituras previas al fallo se conservan; no hay rollback del lote.
            conn.commit()
            logger.exception(f"Ingesta fallida ({e.error_code}): {e.message}")
            return 2

    logger.info(f"Ingesta OK: {result.merged}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
