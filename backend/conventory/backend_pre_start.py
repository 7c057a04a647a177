import logging
import time

from conventory.core.dal import (
    ConfigurationError,
    DataAccessLayer,
    DatabaseConnectionError,
    get_data_access,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

max_tries = 60 * 5  # 5 minutes
wait_seconds = 1


def init(dal: DataAccessLayer) -> None:
    """Raise unless one probe through ``dal`` succeeds."""
    status = dal.health_check()
    if not status.healthy:
        raise DatabaseConnectionError(status.error or "Database probe failed")


def wait_for_database(
    tries: int = max_tries, wait: float = wait_seconds
) -> DataAccessLayer:
    """
    Retry until the configured database answers. ConfigurationError is not
    retried: missing parameters will not appear by waiting.
    """
    last_error: Exception | None = None
    for attempt in range(1, tries + 1):
        try:
            dal = get_data_access()
            init(dal)
            return dal
        except ConfigurationError:
            raise
        except Exception as e:
            last_error = e
            logger.warning("Database not ready (attempt %d/%d): %s", attempt, tries, e)
            if attempt < tries:
                time.sleep(wait)
    assert last_error is not None
    raise last_error


def main() -> None:
    logger.info("Initializing service")
    dal = wait_for_database()
    logger.info("Service finished initializing (%s)", dal.get_adapter_type().value)


if __name__ == "__main__":
    main()
