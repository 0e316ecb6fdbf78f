"""Dictionary-backed curve store."""

import threading
from typing import Optional

from hook_amm.core.interfaces import CurveStore
from hook_amm.core.state import GlobalConfig, ReserveState


class InMemoryCurveStore(CurveStore):
    """Keeps curve records keyed by mint for the life of the process."""

    def __init__(self):
        self._lock = threading.Lock()
        self._curves: dict[str, ReserveState] = {}
        self._config: Optional[GlobalConfig] = None

    def get(self, mint: str) -> Optional[ReserveState]:
        with self._lock:
            return self._curves.get(mint)

    def save(self, state: ReserveState) -> None:
        with self._lock:
            self._curves[state.mint] = state

    def list_curves(self) -> list[ReserveState]:
        with self._lock:
            return sorted(self._curves.values(), key=lambda s: s.index)

    def load_config(self) -> Optional[GlobalConfig]:
        with self._lock:
            if self._config is None:
                return None
            return GlobalConfig(**vars(self._config))

    def save_config(self, config: GlobalConfig) -> None:
        with self._lock:
            self._config = GlobalConfig(**vars(config))
