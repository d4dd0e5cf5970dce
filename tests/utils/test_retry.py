# ABOUTME: Tests for the popup retry policy built on tenacity
# ABOUTME: Retries empty results, gives up quietly, and never retries exceptions

import pytest

from town_scraper.utils.retry import popup_retrying


class TestPopupRetrying:
    @pytest.mark.asyncio
    async def test_returns_first_non_empty_result(self):
        results = iter([None, "", "popup"])
        calls = 0

        async def attempt():
            nonlocal calls
            calls += 1
            return next(results)

        assert await popup_retrying(3)(attempt) == "popup"
        assert calls == 3

    @pytest.mark.asyncio
    async def test_exhaustion_returns_none(self):
        calls = 0

        async def attempt():
            nonlocal calls
            calls += 1
            return None

        assert await popup_retrying(2)(attempt) is None
        assert calls == 2

    @pytest.mark.asyncio
    async def test_exceptions_propagate_without_retry(self):
        calls = 0

        async def attempt():
            nonlocal calls
            calls += 1
            raise RuntimeError("page crashed")

        with pytest.raises(RuntimeError, match="page crashed"):
            await popup_retrying(3)(attempt)
        assert calls == 1
