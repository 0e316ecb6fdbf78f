"""SQLite persistence for curves, the global config and trade history."""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from hook_amm.core.interfaces import CurveStore, TradeEventSink
from hook_amm.core.state import GlobalConfig, ReserveState
from hook_amm.core.trade import TradeEvent

logger = logging.getLogger(__name__)

# u64 values are stored as TEXT: SQLite INTEGER is signed 64-bit.
_CURVE_COLUMNS = (
    "mint",
    "creator",
    "virtual_token_reserves",
    "virtual_sol_reserves",
    "real_token_reserves",
    "real_sol_reserves",
    "token_total_supply",
    "complete",
    "idx",
)


class SQLiteCurveStore(CurveStore, TradeEventSink):
    """Manages the SQLite database for curve records and trade events."""

    def __init__(self, db_path: str = "data/curves.db"):
        self.db_path = db_path
        self._shared_lock = threading.Lock()
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            self._shared = None
        else:
            # A private in-memory database lives only as long as its connection
            self._shared = sqlite3.connect(":memory:", check_same_thread=False)
            self._shared.row_factory = sqlite3.Row
        self.init_db()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """A fresh connection per call, or the shared one held under its lock."""
        if self._shared is not None:
            with self._shared_lock:
                yield self._shared
            return

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def init_db(self):
        """Create tables if they don't exist."""
        with self._connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS curves (
                    mint TEXT PRIMARY KEY,
                    creator TEXT NOT NULL,
                    virtual_token_reserves TEXT NOT NULL,
                    virtual_sol_reserves TEXT NOT NULL,
                    real_token_reserves TEXT NOT NULL,
                    real_sol_reserves TEXT NOT NULL,
                    token_total_supply TEXT NOT NULL,
                    complete INTEGER NOT NULL DEFAULT 0,
                    idx TEXT NOT NULL UNIQUE,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS global_config (
                    id INTEGER PRIMARY KEY CHECK(id = 1),
                    authority TEXT NOT NULL,
                    fee_recipient TEXT NOT NULL,
                    total_curves TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trades (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    mint TEXT NOT NULL,
                    user TEXT NOT NULL,
                    sol_amount TEXT NOT NULL,
                    token_amount TEXT NOT NULL,
                    is_buy INTEGER NOT NULL,
                    fee TEXT NOT NULL,
                    virtual_sol_reserves TEXT NOT NULL,
                    virtual_token_reserves TEXT NOT NULL,
                    timestamp INTEGER NOT NULL,
                    FOREIGN KEY (mint) REFERENCES curves(mint)
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_trades_mint
                ON trades(mint)
            """)

            conn.commit()

    # Curves

    def get(self, mint: str) -> Optional[ReserveState]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM curves WHERE mint = ?", (mint,))
            row = cursor.fetchone()

        if row:
            return self._row_to_state(dict(row))
        return None

    def save(self, state: ReserveState) -> None:
        with self._connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(f"""
                    INSERT INTO curves ({", ".join(_CURVE_COLUMNS)})
                    VALUES ({", ".join("?" for _ in _CURVE_COLUMNS)})
                    ON CONFLICT(mint) DO UPDATE SET
                        real_token_reserves = excluded.real_token_reserves,
                        real_sol_reserves = excluded.real_sol_reserves,
                        complete = excluded.complete,
                        updated_at = CURRENT_TIMESTAMP
                """, (
                    state.mint,
                    state.creator,
                    str(state.virtual_token_reserves),
                    str(state.virtual_sol_reserves),
                    str(state.real_token_reserves),
                    str(state.real_sol_reserves),
                    str(state.token_total_supply),
                    int(state.complete),
                    str(state.index),
                ))
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def list_curves(self) -> List[ReserveState]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM curves")
            rows = cursor.fetchall()

        states = [self._row_to_state(dict(row)) for row in rows]
        return sorted(states, key=lambda s: s.index)

    @staticmethod
    def _row_to_state(row: Dict) -> ReserveState:
        row["index"] = row.pop("idx")
        return ReserveState.from_record(row)

    # Global config

    def load_config(self) -> Optional[GlobalConfig]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM global_config WHERE id = 1")
            row = cursor.fetchone()

        if row:
            return GlobalConfig(
                authority=row["authority"],
                fee_recipient=row["fee_recipient"],
                total_curves=int(row["total_curves"]),
            )
        return None

    def save_config(self, config: GlobalConfig) -> None:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO global_config (id, authority, fee_recipient, total_curves)
                VALUES (1, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    authority = excluded.authority,
                    fee_recipient = excluded.fee_recipient,
                    total_curves = excluded.total_curves
            """, (config.authority, config.fee_recipient, str(config.total_curves)))
            conn.commit()

    # Trades

    def publish(self, event: TradeEvent) -> None:
        """Append a trade event to the history table."""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO trades (
                    mint, user, sol_amount, token_amount, is_buy, fee,
                    virtual_sol_reserves, virtual_token_reserves, timestamp
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                event.mint, event.user,
                str(event.sol_amount), str(event.token_amount),
                int(event.is_buy), str(event.fee),
                str(event.virtual_sol_reserves), str(event.virtual_token_reserves),
                event.timestamp,
            ))
            conn.commit()

    def get_trades(self, mint: str) -> List[TradeEvent]:
        """Trade history for a curve in execution order."""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT * FROM trades
                WHERE mint = ?
                ORDER BY timestamp, id
            """, (mint,))
            rows = cursor.fetchall()

        return [
            TradeEvent(
                mint=row["mint"],
                user=row["user"],
                sol_amount=int(row["sol_amount"]),
                token_amount=int(row["token_amount"]),
                is_buy=bool(row["is_buy"]),
                fee=int(row["fee"]),
                virtual_sol_reserves=int(row["virtual_sol_reserves"]),
                virtual_token_reserves=int(row["virtual_token_reserves"]),
                timestamp=row["timestamp"],
            )
            for row in rows
        ]
