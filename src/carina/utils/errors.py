"""Error wrapping for backend operations."""

from collections.abc import Iterator
from contextlib import contextmanager

from carina.core.exceptions import CarinaError
from carina.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def backend_errors(backend: str, message: str) -> Iterator[None]:
    """Re-raise CarinaErrors with the backend tag and operation prepended.

    Args:
        backend: Backend name, e.g. "magnum"
        message: What was being attempted, e.g. "Unable to list clusters"

    Raises:
        CarinaError: Same type as the caught error, message "[backend] message: cause"
    """
    try:
        yield
    except CarinaError as e:
        logger.debug("backend_operation_failed", backend=backend, operation=message, error=str(e))
        raise e.with_context(f"[{backend}] {message}") from e
