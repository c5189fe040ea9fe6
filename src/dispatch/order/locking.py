"""Write serialization and conflict translation for orders and drivers.

Protean checks the aggregate version on every save and refuses a write built
from a stale read with ``ExpectedVersionError``; that refusal surfaces as
``Conflict`` so callers reload and retry. Inside one process, writers on the
same aggregate also queue up behind a lock that spans the whole unit of work,
so they do not fail against each other. Writers on different aggregates never
wait for each other. Commands can carry ``expected_version`` so a caller
working from a stale read gets a ``Conflict`` instead of overwriting.
"""

import threading
import weakref
from contextlib import contextmanager

from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from dispatch.exceptions import Conflict
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)

# Entries disappear once no writer holds or waits on the lock
_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_registry_lock = threading.Lock()


def _lock_for(key: str) -> threading.Lock:
    with _registry_lock:
        lock = _locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _locks[key] = lock
        return lock


@contextmanager
def write_lock(key: str):
    """Hold the write lock for ``key`` for the duration of the block."""
    lock = _lock_for(key)
    with lock:
        yield


def order_lock(order_id: str):
    return write_lock(f"order:{order_id}")


def driver_lock(driver_id: str):
    return write_lock(f"driver:{driver_id}")


@contextmanager
def version_conflicts(**context):
    """Turn Protean's stale-save refusal into ``Conflict``."""
    try:
        yield
    except ExpectedVersionError as exc:
        logger.warning("Stale write rejected", reason=str(exc), **context)
        raise Conflict("Record was modified concurrently; reload and retry", **context) from exc


def process_for_order(order_id: str, command):
    """Process ``command`` synchronously while holding the order's write lock."""
    with order_lock(str(order_id)), version_conflicts(order_id=str(order_id)):
        return current_domain.process(command, asynchronous=False)


def process_for_driver(driver_id: str, command):
    """Process ``command`` synchronously while holding the driver's write lock."""
    with driver_lock(str(driver_id)), version_conflicts(driver_id=str(driver_id)):
        return current_domain.process(command, asynchronous=False)
