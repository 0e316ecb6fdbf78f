"""Process-wide registry assigning curve indices."""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from hook_amm.core.checked import U64_MAX
from hook_amm.core.errors import (
    ArithmeticOverflow,
    GlobalConfigAlreadyInitialized,
    GlobalConfigNotInitialized,
)
from hook_amm.core.interfaces import CurveStore
from hook_amm.core.state import GlobalConfig

logger = logging.getLogger(__name__)


class GlobalRegistry:
    """Holds the GlobalConfig and hands out monotonic curve indices.

    All reads and increments of total_curves go through one lock, so no two
    creations can observe the same pre-increment value. When a store is
    given, the config is loaded from it on construction and written back
    after every increment.
    """

    def __init__(self, store: Optional[CurveStore] = None):
        self._lock = threading.Lock()
        self._store = store
        self._config: Optional[GlobalConfig] = store.load_config() if store else None

    def initialize(self, authority: str, fee_recipient: str) -> GlobalConfig:
        with self._lock:
            if self._config is not None:
                raise GlobalConfigAlreadyInitialized()
            self._config = GlobalConfig(authority=authority, fee_recipient=fee_recipient)
            self._persist()
        logger.info("Global config initialized (authority=%s, fee_recipient=%s)",
                    authority, fee_recipient)
        return self.config

    @property
    def initialized(self) -> bool:
        return self._config is not None

    @property
    def config(self) -> GlobalConfig:
        """Copy of the current config."""
        config = self._require_config()
        return GlobalConfig(
            authority=config.authority,
            fee_recipient=config.fee_recipient,
            total_curves=config.total_curves,
        )

    @property
    def fee_recipient(self) -> str:
        return self._require_config().fee_recipient

    @property
    def total_curves(self) -> int:
        return self._require_config().total_curves

    def next_index(self) -> int:
        """Return the current counter value and advance it."""
        with self.allocate() as index:
            return index

    @contextmanager
    def allocate(self) -> Iterator[int]:
        """Reserve the next index for the duration of a creation.

        The lock is held until the block exits; the counter is advanced only
        if the block completes without raising.
        """
        with self._lock:
            config = self._require_config()
            index = config.total_curves
            if index >= U64_MAX:
                raise ArithmeticOverflow("total_curves")
            yield index
            config.total_curves = index + 1
            self._persist()

    def _require_config(self) -> GlobalConfig:
        if self._config is None:
            raise GlobalConfigNotInitialized()
        return self._config

    def _persist(self) -> None:
        if self._store is not None:
            self._store.save_config(self._config)
