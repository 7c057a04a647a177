"""
Lifecycle of data access handles.

- get_data_access(): the process-wide singleton, built once (thread-safe
  double-checked locking) and torn down only by shutdown_data_access().
- create_data_access_layer(): a fresh facade with its own pool, owned and
  closed by the caller; disposable_data_access() wraps it in a scope.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from conventory.core.config import Settings

from .adapters import get_adapter
from .facade import DataAccessLayer, DisposableDataAccessLayer
from .models import AdapterType, ConnectionDescriptor
from .resolver import from_url, resolve

_log = logging.getLogger(__name__)

_data_access: DataAccessLayer | None = None
_data_access_lock = threading.Lock()


def get_data_access() -> DataAccessLayer:
    """Return the singleton facade, resolving config and connecting on first use."""
    global _data_access
    if _data_access is None:
        with _data_access_lock:
            if _data_access is None:
                descriptor = resolve()
                adapter = get_adapter(descriptor)
                try:
                    adapter.open()
                except BaseException:
                    adapter.close()
                    raise
                _data_access = DataAccessLayer(adapter)
                _log.info("Data access singleton ready (%s)", descriptor)
    return _data_access


def shutdown_data_access() -> None:
    """Close the singleton's pool at process shutdown. A later get_data_access() rebuilds it."""
    global _data_access
    with _data_access_lock:
        dal, _data_access = _data_access, None
    if dal is not None:
        dal._release()
        _log.info("Data access singleton shut down")


def create_data_access_layer(
    connection: ConnectionDescriptor | str | None = None,
    *,
    engine: str | AdapterType | None = None,
    settings: Settings | None = None,
    **overrides: Any,
) -> DisposableDataAccessLayer:
    """
    Build a brand-new facade backed by a fresh adapter.

    ``connection`` is a descriptor, a candidate connection URL, or None to use
    the environment (engine auto-detected from DB_ENGINE unless ``engine`` is
    given). ``overrides`` replace descriptor fields, e.g. ``max_size=1``.
    Nothing is connected until the first operation.
    """
    if connection is None:
        descriptor = resolve(settings, engine=engine)
    elif isinstance(connection, str):
        descriptor = from_url(connection, settings=settings, engine=engine)
    else:
        descriptor = connection
    if overrides:
        descriptor = descriptor.model_copy(update=overrides)
    return DisposableDataAccessLayer(get_adapter(descriptor))


@contextmanager
def disposable_data_access(
    connection: ConnectionDescriptor | str | None = None,
    **kwargs: Any,
) -> Iterator[DisposableDataAccessLayer]:
    """Scoped disposable facade; closed on every exit path."""
    dal = create_data_access_layer(connection, **kwargs)
    try:
        yield dal
    finally:
        dal.close()
