"""
Precomputed monsoon figure store.

The forecasting notebooks export Plotly figures as JSON; the dashboard serves
them by short key (fig1, fig2, ...). Parsed documents are kept in a bounded
least-recently-used cache owned by the store.
"""

import logging
import os
import threading
from collections import OrderedDict
from typing import Any, Optional

from monsoon_dashboard.config import FIGURE_FILES, FIGURE_CACHE_CAPACITY, RESULTS_DIR
from monsoon_dashboard.engine.data_files import read_json_file

logger = logging.getLogger(__name__)


class FigureNotFoundError(LookupError):
    """The requested figure key is not part of the published set."""


class FigureCache:
    """Bounded LRU mapping of file name -> parsed JSON."""

    def __init__(self, capacity: int = FIGURE_CACHE_CAPACITY):
        if capacity < 1:
            raise ValueError("Cache capacity must be at least 1.")
        self.capacity = capacity
        self._entries: OrderedDict[str, Any] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted figure %s from cache", evicted)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class FigureStore:
    """Resolves figure keys to files under a results directory."""

    def __init__(
        self,
        results_dir: str = RESULTS_DIR,
        figure_files: Optional[dict[str, str]] = None,
        cache: Optional[FigureCache] = None,
    ):
        self.results_dir = results_dir
        self.figure_files = dict(figure_files if figure_files is not None else FIGURE_FILES)
        self.cache = cache if cache is not None else FigureCache()

    def filename_for(self, key: str) -> str:
        try:
            return self.figure_files[key]
        except KeyError:
            raise FigureNotFoundError(f"Unknown figure: {key}") from None

    def available_keys(self) -> list[str]:
        """Keys whose figure file is present under the results directory."""
        return sorted(
            key
            for key, filename in self.figure_files.items()
            if os.path.isfile(os.path.join(self.results_dir, filename))
        )

    def load(self, key: str) -> Any:
        """
        Return the parsed figure JSON for a key.

        Raises:
            FigureNotFoundError: unknown key.
            SourceUnavailableError: file missing or not valid JSON.
        """
        filename = self.filename_for(key)
        cached = self.cache.get(filename)
        if cached is not None:
            return cached

        figure = read_json_file(os.path.join(self.results_dir, filename))
        self.cache.put(filename, figure)
        return figure
