"""Explicit, thread-safe cache of Gauss node sets."""

import threading
from typing import Dict, Optional, Tuple

import torch
from torch import Tensor

from ._nodes import QuadratureFamily, gauss_nodes_weights


class NodeCache:
    """
    Read-through cache of Gauss nodes and weights.

    Node sets are keyed by ``(family, n, dtype, device)``. A miss computes the
    set with :func:`gauss_nodes_weights` and stores it; every lookup returns
    fresh copies, so callers may modify what they get back without affecting
    other users of the cache.

    The cache is owned by the caller and passed explicitly (``cache=``) to the
    Gauss drivers and rule classes. It is safe to share between threads.

    Examples
    --------
    >>> cache = NodeCache()
    >>> nodes, weights = cache.get("legendre", 16)
    >>> len(cache)
    1
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[tuple, Tuple[Tensor, Tensor]] = {}

    @staticmethod
    def _key(family, n, dtype, device) -> tuple:
        return (
            QuadratureFamily(family),
            int(n),
            dtype,
            torch.device(device) if device is not None else torch.device("cpu"),
        )

    def get(
        self,
        family,
        n: int,
        *,
        dtype: torch.dtype = torch.float64,
        device: Optional[torch.device] = None,
    ) -> Tuple[Tensor, Tensor]:
        """
        Return ``(nodes, weights)`` for ``family`` and ``n``, computing them
        on a miss.
        """
        key = self._key(family, n, dtype, device)

        with self._lock:
            entry = self._entries.get(key)

        if entry is None:
            # Computed outside the lock; a concurrent miss on the same key
            # yields an identical node set
            entry = gauss_nodes_weights(key[0], key[1], dtype=dtype, device=key[3])
            with self._lock:
                entry = self._entries.setdefault(key, entry)

        nodes, weights = entry
        return nodes.clone(), weights.clone()

    def __contains__(self, key) -> bool:
        family, n, dtype, device = key
        with self._lock:
            return self._key(family, n, dtype, device) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        """Drop every cached node set."""
        with self._lock:
            self._entries.clear()
