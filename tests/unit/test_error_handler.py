"""Unit tests for in-memory error tracking."""

import pytest

from docchat.core.error_handler import (
    clear_error_tracking,
    get_error_counts,
    get_recent_errors,
    record_error,
)
from docchat.core.exceptions import LLMTimeoutError, SearchError


@pytest.fixture(autouse=True)
def clean_tracking():
    clear_error_tracking()
    yield
    clear_error_tracking()


@pytest.mark.unit
class TestErrorTracking:
    """Test record_error and its views."""

    def test_counts_by_type(self):
        context = {"method": "POST", "path": "/api/chat"}

        record_error(LLMTimeoutError("slow"), context)
        record_error(LLMTimeoutError("slow again"), context)
        record_error(SearchError("db down"), context)

        assert get_error_counts() == {"LLMTimeoutError": 2, "SearchError": 1}

    def test_recent_errors_keep_context(self):
        try:
            raise SearchError("db down")
        except SearchError as e:
            record_error(e, {"path": "/webhook/line"})

        (recent,) = get_recent_errors()
        assert recent["error_type"] == "SearchError"
        assert recent["error_message"] == "db down"
        assert recent["request_context"] == {"path": "/webhook/line"}
        assert "Traceback" in recent["stack_trace"]

    def test_recent_errors_limit(self):
        for i in range(5):
            record_error(ValueError(str(i)), {})

        assert [e["error_message"] for e in get_recent_errors(limit=2)] == ["3", "4"]
