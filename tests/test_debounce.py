"""Tests for the debounced search utility."""

import asyncio

import pytest

from invoice_composer import DebouncedSearch


class ControlledFetch:
    """Fetch function whose responses are released by the test."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.gates: dict[str, asyncio.Event] = {}

    def gate(self, query: str) -> asyncio.Event:
        return self.gates.setdefault(query, asyncio.Event())

    async def __call__(self, query: str) -> list[str]:
        self.calls.append(query)
        await self.gate(query).wait()
        return [f"{query}-result"]


class TestStaleResponses:
    """Results are applied in query order, not response order."""

    def test_late_response_of_older_query_discarded(self) -> None:
        """Test 'a' resolving after 'ab' does not replace 'ab' results."""

        async def scenario() -> list[tuple[str, list[str]]]:
            fetch = ControlledFetch()
            applied: list[tuple[str, list[str]]] = []
            search = DebouncedSearch(
                fetch, on_result=lambda q, r: applied.append((q, r)), delay=0, min_length=1
            )

            search.submit("a")
            await asyncio.sleep(0)  # "a" is now in flight
            search.submit("ab")
            await asyncio.sleep(0)

            fetch.gate("ab").set()
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            fetch.gate("a").set()
            await search.wait()

            assert fetch.calls == ["a", "ab"]
            assert search.latest_query == "ab"
            return applied

        applied = asyncio.run(scenario())

        assert applied == [("ab", ["ab-result"])]

    def test_older_query_resolving_first_is_discarded(self) -> None:
        """Test an older result is dropped even when it arrives first."""

        async def scenario() -> list[str]:
            fetch = ControlledFetch()
            applied: list[str] = []
            search = DebouncedSearch(
                fetch, on_result=lambda q, r: applied.append(q), delay=0, min_length=1
            )

            search.submit("a")
            await asyncio.sleep(0)
            search.submit("ab")
            await asyncio.sleep(0)

            fetch.gate("a").set()
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            fetch.gate("ab").set()
            await search.wait()
            return applied

        assert asyncio.run(scenario()) == ["ab"]


class TestDebounce:
    """Rapid typing collapses into one fetch."""

    def test_rapid_queries_fetch_once(self) -> None:
        """Test only the last query inside the window is fetched."""

        async def scenario() -> tuple[list[str], list[str]]:
            calls: list[str] = []
            applied: list[str] = []

            async def fetch(query: str) -> str:
                calls.append(query)
                return query.upper()

            search = DebouncedSearch(fetch, on_result=lambda q, r: applied.append(r), delay=0.05)
            for query in ("we", "web", "web d", "web de"):
                search.submit(query)
                await asyncio.sleep(0.01)
            await search.wait()
            return calls, applied

        calls, applied = asyncio.run(scenario())

        assert calls == ["web de"]
        assert applied == ["WEB DE"]

    def test_spaced_queries_each_fetched(self) -> None:
        """Test queries further apart than the window are all applied."""

        async def scenario() -> list[str]:
            applied: list[str] = []

            async def fetch(query: str) -> str:
                return query

            search = DebouncedSearch(fetch, on_result=lambda q, r: applied.append(r), delay=0.01)
            search.submit("web")
            await search.wait()
            search.submit("website")
            await search.wait()
            return applied

        assert asyncio.run(scenario()) == ["web", "website"]


class TestShortQueries:
    """Short queries clear instead of fetching."""

    def test_short_query_clears(self) -> None:
        """Test a short query calls on_clear and invalidates pending results."""

        async def scenario() -> tuple[list[str], list[str], list[str]]:
            fetch = ControlledFetch()
            applied: list[str] = []
            cleared: list[str] = []
            search = DebouncedSearch(
                fetch,
                on_result=lambda q, r: applied.append(q),
                on_clear=cleared.append,
                delay=0,
            )

            search.submit("web")
            await asyncio.sleep(0)
            task = search.submit("w")
            assert task is None

            fetch.gate("web").set()
            await search.wait()
            return fetch.calls, applied, cleared

        calls, applied, cleared = asyncio.run(scenario())

        assert calls == ["web"]
        assert applied == []
        assert cleared == ["w"]


class TestErrors:
    """Fetch errors are non-fatal."""

    def test_error_reported_to_callback(self) -> None:
        """Test on_error receives failures of the latest query."""

        async def scenario() -> list[tuple[str, str]]:
            errors: list[tuple[str, str]] = []

            async def fetch(query: str) -> str:
                raise RuntimeError("catalog down")

            search = DebouncedSearch(
                fetch,
                on_result=lambda q, r: None,
                on_error=lambda q, e: errors.append((q, str(e))),
                delay=0,
            )
            search.submit("web")
            await search.wait()
            return errors

        assert asyncio.run(scenario()) == [("web", "catalog down")]

    def test_negative_delay_rejected(self) -> None:
        """Test the debounce window cannot be negative."""

        async def fetch(query: str) -> str:
            return query

        with pytest.raises(ValueError, match="negative"):
            DebouncedSearch(fetch, on_result=lambda q, r: None, delay=-1)


class TestCancel:
    """Tests for cancel."""

    def test_cancel_suppresses_results(self) -> None:
        """Test cancelled searches never apply results."""

        async def scenario() -> list[str]:
            applied: list[str] = []

            async def fetch(query: str) -> str:
                return query

            search = DebouncedSearch(fetch, on_result=lambda q, r: applied.append(r), delay=0.05)
            search.submit("web")
            search.cancel()
            await search.wait()
            await asyncio.sleep(0.06)
            return applied

        assert asyncio.run(scenario()) == []
