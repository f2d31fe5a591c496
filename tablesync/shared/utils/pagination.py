"""
Paginacion generica por cursor sobre un page fetcher inyectado.

El page fetcher recibe el cursor (None para la primera pagina) y retorna
un PropertyPage(items, has_more, next_cursor). No hay reintentos ni
timeouts aqui: eso es responsabilidad del fetcher.
"""
from __future__ import annotations

from typing import Callable, Generic, Iterator, List, Optional, TypeVar

from loguru import logger

from tablesync.domain.entities.properties import PropertyPage
from tablesync.shared.exceptions.integration import FetchError

T = TypeVar("T")

PageFetcher = Callable[[Optional[str]], PropertyPage]


class CursorPaginator(Generic[T]):
    """
    Itera los items de todas las paginas, de forma secuencial y bloqueante.

    Es de un solo uso. Si una pagina falla con FetchError, la iteracion
    termina sin excepcion; `error` guarda el fallo y `cursor` el punto
    desde donde se puede reanudar con un paginador nuevo.
    
    Uso:
        paginator = CursorPaginator(fetch_page)
        items = list(paginator)
        if paginator.error:
            guardar(paginator.cursor)
    """
    
    def __init__(self, fetch_page: PageFetcher, start_cursor: Optional[str] = None) -> None:
        self._fetch_page = fetch_page
        self.cursor: Optional[str] = start_cursor
        self.exhausted = False
        self.error: Optional[FetchError] = None
        self.pages_fetched = 0
        self._started = False
    
    def __iter__(self) -> Iterator[T]:
        if self._started:
            raise RuntimeError("CursorPaginator ya fue consumido; crea uno nuevo con el cursor guardado")
        self._started = True
        return self._iterate()
    
    def _iterate(self) -> Iterator[T]:
        while True:
            try:
                page = self._fetch_page(self.cursor)
            except FetchError as e:
                self.error = e
                logger.warning(
                    f"Paginacion detenida tras {self.pages_fetched} paginas "
                    f"(cursor={self.cursor}): {e.message}"
                )
                return
            
            self.pages_fetched += 1
            yield from page.items
            
            if not page.has_more or not page.next_cursor:
                self.exhausted = True
                self.cursor = None
                return
            self.cursor = page.next_cursor


def resolve_relation(
    record_id: str,
    property_id: str,
    page_fetcher: PageFetcher,
    start_cursor: Optional[str] = None,
) -> List[str]:
    """
    Resuelve todos los ids destino de una relacion paginada.

    Ante un fallo de pagina se retorna lo acumulado hasta ese momento
    (resultado parcial, nunca excepcion).
    """
    paginator: CursorPaginator[str] = CursorPaginator(page_fetcher, start_cursor=start_cursor)
    target_ids = list(paginator)
    
    if paginator.error is not None:
        logger.warning(
            f"Relacion {property_id} de {record_id} resuelta parcialmente: "
            f"{len(target_ids)} ids, reanudable desde cursor={paginator.cursor}"
        )
    else:
        logger.debug(f"Relacion {property_id} de {record_id}: {len(target_ids)} ids")
    return target_ids
