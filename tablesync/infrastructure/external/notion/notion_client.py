"""
Cliente mínimo de Notion REST API (sin SDKs externos).

Requisitos cubiertos:
- requests
- paginación por start_cursor / next_cursor
- rate-limit/backoff (429, 5xx)
- page fetchers inyectables para resolver relaciones paginadas
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests
from loguru import logger

from tablesync.core.config import Settings
from tablesync.domain.entities.properties import PropertyPage
from tablesync.shared.exceptions.integration import NotionApiError
from tablesync.shared.utils.pagination import PageFetcher


@dataclass(frozen=True)
class NotionCredentials:
    token: str


class NotionClient:
    """
    Cliente HTTP de Notion.

    Importante:
    - No decodifica propiedades: eso lo hace PropertyDecoder.
    - Los reintentos viven aqui; el paginador del core no reintenta.
    """

    def __init__(
        self,
        credentials: NotionCredentials,
        *,
        session: Optional[requests.Session] = None,
        base_url: str = "https://api.notion.com/v1",
        notion_version: str = "2022-06-28",
        timeout_s: int = 30,
        max_retries: int = 6,
        min_backoff_s: float = 0.8,
        max_backoff_s: float = 20.0,
        page_size: int = 100,
    ) -> None:
        self._creds = credentials
        self._base_url = base_url.rstrip("/")
        self._notion_version = notion_version
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._min_backoff_s = min_backoff_s
        self._max_backoff_s = max_backoff_s
        self._page_size = page_size
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, *, session: Optional[requests.Session] = None) -> "NotionClient":
        if not settings.NOTION_TOKEN:
            raise NotionApiError("Falta NOTION_TOKEN en la configuracion")
        return cls(
            NotionCredentials(token=settings.NOTION_TOKEN),
            session=session,
            base_url=settings.NOTION_BASE_URL,
            notion_version=settings.NOTION_VERSION,
            timeout_s=settings.NOTION_TIMEOUT_S,
            max_retries=settings.NOTION_MAX_RETRIES,
            page_size=settings.NOTION_PAGE_SIZE,
        )

    def retrieve_page(self, page_id: str) -> dict[str, Any]:
        """Obtiene una pagina con sus propiedades."""
        return self._request_json("GET", f"{self._base_url}/pages/{page_id}", query=[])

    def fetch_relation_page(
        self, page_id: str, property_id: str, cursor: Optional[str] = None
    ) -> PropertyPage:
        """
        Obtiene una pagina de items de una propiedad relation.

        Los items retornados son los ids de las paginas destino.
        """
        query: list[tuple[str, Any]] = [("page_size", self._page_size)]
        if cursor:
            query.append(("start_cursor", cursor))

        url = f"{self._base_url}/pages/{page_id}/properties/{property_id}"
        payload = self._request_json("GET", url, query=query)

        ids: list[str] = []
        for item in payload.get("results") or []:
            relation = item.get("relation") or {}
            target_id = relation.get("id")
            if target_id:
                ids.append(target_id)

        return PropertyPage(
            items=ids,
            has_more=bool(payload.get("has_more")),
            next_cursor=payload.get("next_cursor"),
        )

    def relation_page_fetcher(self, page_id: str, property_id: str) -> PageFetcher:
        """Page fetcher ligado a una relacion concreta (para resolve_relation)."""

        def fetch(cursor: Optional[str]) -> PropertyPage:
            return self.fetch_relation_page(page_id, property_id, cursor)

        return fetch

    def relation_fetcher_factory(self) -> Callable[[str, str], PageFetcher]:
        """Factory (page_id, property_id) -> page fetcher, aceptada por decode_all."""
        return self.relation_page_fetcher

    def _request_json(
        self, method: str, url: str, *, query: list[tuple[str, Any]]
    ) -> dict[str, Any]:
        """
        Request HTTP con backoff para 429/5xx.

        Estrategia:
        - 429: respeta Retry-After si existe, si no exponencial con jitter simple.
        - 5xx: exponencial con jitter.
        - 4xx (no 429) y errores de transporte: error inmediato.
        """
        headers = {
            "Authorization": f"Bearer {self._creds.token}",
            "Notion-Version": self._notion_version,
            "Content-Type": "application/json",
        }

        for attempt in range(self._max_retries + 1):
            try:
                resp = self._session.request(
                    method=method,
                    url=url,
                    params=query,
                    headers=headers,
                    timeout=self._timeout_s,
                )
            except requests.RequestException as e:
                raise NotionApiError(f"Notion request falló: {e}") from e

            if 200 <= resp.status_code < 300:
                try:
                    return resp.json()
                except ValueError as e:
                    raise NotionApiError(
                        f"Respuesta no JSON de Notion: {e}", status_code=resp.status_code
                    ) from e

            # Errores recuperables
            if resp.status_code == 429 or 500 <= resp.status_code < 600:
                if attempt >= self._max_retries:
                    raise NotionApiError(
                        f"Notion error {resp.status_code} tras {attempt} reintentos: {resp.text}",
                        status_code=resp.status_code,
                    )

                retry_after = resp.headers.get("Retry-After")
                if retry_after:
                    try:
                        sleep_s = float(retry_after)
                    except ValueError:
                        sleep_s = self._min_backoff_s
                else:
                    base = min(self._max_backoff_s, self._min_backoff_s * (2**attempt))
                    sleep_s = base + (0.15 * base)

                logger.debug(f"Notion {resp.status_code}, reintento {attempt + 1} en {sleep_s:.2f}s")
                time.sleep(sleep_s)
                continue

            # Errores no recuperables
            raise NotionApiError(
                f"Notion request falló {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
            )

        # range() siempre entra al menos una vez; esto solo protege max_retries < 0.
        raise NotionApiError("Notion request sin intentos configurados")
