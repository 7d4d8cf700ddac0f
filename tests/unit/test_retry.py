"""Tests for retry utilities."""

from unittest.mock import MagicMock

import pytest

from carina.core.exceptions import TokenExpiredError
from carina.utils.retry import refresh_and_retry


def _run(policy, func):
    for attempt in policy:
        with attempt:
            result = func()
    return result


def test_refresh_and_retry_success_first_try():
    """Test successful execution on first try does not refresh."""
    refresh = MagicMock()
    func = MagicMock(return_value="ok")

    result = _run(refresh_and_retry(refresh, (TokenExpiredError,)), func)

    assert result == "ok"
    assert func.call_count == 1
    refresh.assert_not_called()


def test_refresh_and_retry_refreshes_then_succeeds():
    """Test a single refresh happens before the replay."""
    refresh = MagicMock()
    func = MagicMock(side_effect=[TokenExpiredError("expired"), "ok"])

    result = _run(refresh_and_retry(refresh, (TokenExpiredError,)), func)

    assert result == "ok"
    assert func.call_count == 2
    refresh.assert_called_once()


def test_refresh_and_retry_exhausted():
    """Test the last error is re-raised once attempts are used up."""
    refresh = MagicMock()
    func = MagicMock(side_effect=TokenExpiredError("still expired"))

    with pytest.raises(TokenExpiredError, match="still expired"):
        _run(refresh_and_retry(refresh, (TokenExpiredError,), max_attempts=2), func)

    assert func.call_count == 2
    refresh.assert_called_once()


def test_refresh_and_retry_wrong_exception_type():
    """Test that other exception types are not retried."""
    refresh = MagicMock()
    func = MagicMock(side_effect=ValueError("Different error"))

    with pytest.raises(ValueError, match="Different error"):
        _run(refresh_and_retry(refresh, (TokenExpiredError,)), func)

    assert func.call_count == 1
    refresh.assert_not_called()


def test_refresh_failure_propagates():
    """Test an error raised by refresh aborts the retry."""
    refresh = MagicMock(side_effect=RuntimeError("identity down"))
    func = MagicMock(side_effect=TokenExpiredError("expired"))

    with pytest.raises(RuntimeError, match="identity down"):
        _run(refresh_and_retry(refresh, (TokenExpiredError,)), func)

    assert func.call_count == 1
