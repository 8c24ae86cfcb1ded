"""Per-product stock locks.

A checkout holds the locks of every product in the cart for the whole
validate, decrement and order-insert sequence, so two checkouts racing
for the last unit are serialised. Locks are re-entrant so the conditional
decrement can take the lock again from inside a checkout.
"""

import threading
from contextlib import ExitStack, contextmanager

_guard = threading.Lock()
_locks: dict[str, threading.RLock] = {}


def lock_for(product_id) -> threading.RLock:
    key = str(product_id)
    with _guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.RLock()
        return lock


@contextmanager
def stock_locks(product_ids):
    """Hold the locks of ``product_ids``, always acquired in sorted id order."""
    with ExitStack() as stack:
        for key in sorted({str(pid) for pid in product_ids}):
            stack.enter_context(lock_for(key))
        yield
