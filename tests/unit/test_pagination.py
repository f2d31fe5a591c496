"""
Tests unitarios para CursorPaginator y resolve_relation.
"""
import pytest

from tablesync.domain.entities.properties import PropertyPage
from tablesync.shared.exceptions.integration import FetchError
from tablesync.shared.utils.pagination import CursorPaginator, resolve_relation


def _pages(*pages, fail_at=None):
    """Fetcher sobre paginas predefinidas; cursor = indice de pagina."""
    seen = []

    def fetch(cursor):
        seen.append(cursor)
        index = int(cursor) if cursor else 0
        if fail_at is not None and index == fail_at:
            raise FetchError(f"fallo en pagina {index}", status_code=500)
        items = pages[index]
        has_more = index + 1 < len(pages)
        return PropertyPage(items=list(items), has_more=has_more, next_cursor=str(index + 1) if has_more else None)

    fetch.seen = seen
    return fetch


class TestCursorPaginator:

    def test_collects_all_pages_in_order(self):
        fetch = _pages(["a", "b"], ["c"], ["d"])
        paginator = CursorPaginator(fetch)

        assert list(paginator) == ["a", "b", "c", "d"]
        assert paginator.exhausted
        assert paginator.error is None
        assert paginator.pages_fetched == 3
        assert fetch.seen == [None, "1", "2"]

    def test_failure_stops_and_keeps_resume_cursor(self):
        fetch = _pages(["a"], ["b"], ["c"], fail_at=2)
        paginator = CursorPaginator(fetch)

        assert list(paginator) == ["a", "b"]
        assert not paginator.exhausted
        assert paginator.error.status_code == 500
        assert paginator.cursor == "2"

    def test_resume_from_supplied_cursor(self):
        fetch = _pages(["a"], ["b"], ["c"])

        assert list(CursorPaginator(fetch, start_cursor="1")) == ["b", "c"]

    def test_is_single_use(self):
        paginator = CursorPaginator(_pages(["a"]))
        list(paginator)

        with pytest.raises(RuntimeError):
            iter(paginator)

    def test_stops_when_next_cursor_missing(self):
        def fetch(cursor):
            return PropertyPage(items=["x"], has_more=True, next_cursor=None)

        assert list(CursorPaginator(fetch)) == ["x"]

    def test_non_fetch_errors_propagate(self):
        def fetch(cursor):
            raise KeyError("bug")

        with pytest.raises(KeyError):
            list(CursorPaginator(fetch))


class TestResolveRelation:

    def test_returns_all_ids(self):
        assert resolve_relation("page", "prop", _pages(["r1", "r2"], ["r3"])) == ["r1", "r2", "r3"]

    def test_partial_result_on_failure(self):
        assert resolve_relation("page", "prop", _pages(["r1"], ["r2"], fail_at=1)) == ["r1"]

    def test_failure_on_first_page_returns_empty(self):
        assert resolve_relation("page", "prop", _pages(["r1"], fail_at=0)) == []
