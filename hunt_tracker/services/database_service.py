import sqlite3
import os
from typing import Dict, Any, List, Optional
from hunt_tracker.core.records import SessionRecord, RecordStats
from hunt_tracker.services.base_service import IRecordStore
from hunt_tracker.logger import logger

_COLUMNS = (
    "id", "started_at", "ended_at", "start_time", "end_time", "duration_seconds",
    "exp_start", "exp_end", "exp_gained", "exp_per_hour",
    "currency_start", "currency_end", "currency_gained", "currency_per_hour",
    "memo"
)

class DatabaseService(IRecordStore):
    """sqlite-backed hunting history. Newest record first, capped at history_limit."""

    def __init__(self, db_path: str = "data/hunt_history.db", history_limit: int = 100):
        self.db_path = db_path
        self.history_limit = history_limit
        self.connection: Optional[sqlite3.Connection] = None

    def initialize(self) -> bool:
        try:
            directory = os.path.dirname(self.db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            self.connection = sqlite3.connect(
                self.db_path,
                check_same_thread=False
            )
            self._create_tables()
            logger.info(f"DatabaseService: Connected to {self.db_path}")
            return True
        except (sqlite3.Error, OSError) as e:
            logger.error(f"DatabaseService: Failed to initialize: {e}")
            return False

    def shutdown(self) -> None:
        if self.connection:
            self.connection.close()
            self.connection = None

    def _create_tables(self):
        cursor = self.connection.cursor()
        # seq keeps insertion order; id is the record identity
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS hunt_records (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                started_at INTEGER NOT NULL,
                ended_at INTEGER NOT NULL,
                start_time TEXT NOT NULL,
                end_time TEXT NOT NULL,
                duration_seconds INTEGER NOT NULL,
                exp_start INTEGER,
                exp_end INTEGER,
                exp_gained INTEGER NOT NULL DEFAULT 0,
                exp_per_hour INTEGER NOT NULL DEFAULT 0,
                currency_start INTEGER,
                currency_end INTEGER,
                currency_gained INTEGER NOT NULL DEFAULT 0,
                currency_per_hour INTEGER NOT NULL DEFAULT 0,
                memo TEXT NOT NULL DEFAULT ''
            )
        """)
        self.connection.commit()

    def save_record(self, record: SessionRecord) -> bool:
        if not self.connection: return False
        try:
            cursor = self.connection.cursor()
            cursor.execute(f"""
                INSERT INTO hunt_records ({", ".join(_COLUMNS)})
                VALUES ({", ".join("?" for _ in _COLUMNS)})
            """, (
                record.id, record.started_at, record.ended_at,
                record.start_time, record.end_time, record.duration_seconds,
                record.exp.start, record.exp.end, record.exp.gained, record.exp.per_hour,
                record.currency.start, record.currency.end, record.currency.gained, record.currency.per_hour,
                record.memo
            ))
            # Evict the oldest beyond the limit
            cursor.execute("""
                DELETE FROM hunt_records WHERE seq NOT IN (
                    SELECT seq FROM hunt_records ORDER BY seq DESC LIMIT ?
                )
            """, (self.history_limit,))
            self.connection.commit()
            logger.info(f"DatabaseService: Record saved {record.id}")
            return True
        except sqlite3.Error as e:
            logger.error(f"DatabaseService: Error saving record: {e}")
            return False

    def load_history(self) -> List[SessionRecord]:
        if not self.connection: return []
        try:
            cursor = self.connection.cursor()
            cursor.execute(f"SELECT {', '.join(_COLUMNS)} FROM hunt_records ORDER BY seq DESC")
            return [self._row_to_record(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            logger.error(f"DatabaseService: Error loading history: {e}")
            return []

    def get_record(self, record_id: str) -> Optional[SessionRecord]:
        if not self.connection: return None
        try:
            cursor = self.connection.cursor()
            cursor.execute(f"SELECT {', '.join(_COLUMNS)} FROM hunt_records WHERE id = ?", (record_id,))
            row = cursor.fetchone()
            return self._row_to_record(row) if row else None
        except sqlite3.Error as e:
            logger.error(f"DatabaseService: Error reading record: {e}")
            return None

    def delete_record(self, record_id: str) -> bool:
        if not self.connection: return False
        try:
            cursor = self.connection.cursor()
            cursor.execute("DELETE FROM hunt_records WHERE id = ?", (record_id,))
            self.connection.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.error(f"DatabaseService: Error deleting record: {e}")
            return False

    def update_record_memo(self, record_id: str, memo: str) -> bool:
        if not self.connection: return False
        try:
            cursor = self.connection.cursor()
            cursor.execute("UPDATE hunt_records SET memo = ? WHERE id = ?", (memo or "", record_id))
            self.connection.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.error(f"DatabaseService: Error updating memo: {e}")
            return False

    def clear_history(self) -> bool:
        if not self.connection: return False
        try:
            self.connection.execute("DELETE FROM hunt_records")
            self.connection.commit()
            logger.info("DatabaseService: History cleared")
            return True
        except sqlite3.Error as e:
            logger.error(f"DatabaseService: Error clearing history: {e}")
            return False

    def get_history_count(self) -> int:
        if not self.connection: return 0
        try:
            cursor = self.connection.cursor()
            cursor.execute("SELECT COUNT(*) FROM hunt_records")
            return cursor.fetchone()[0]
        except sqlite3.Error as e:
            logger.error(f"DatabaseService: Error counting history: {e}")
            return 0

    def get_stats(self) -> Dict[str, Any]:
        if not self.connection: return {}
        try:
            cursor = self.connection.cursor()
            cursor.execute("""
                SELECT COUNT(*), COALESCE(SUM(duration_seconds), 0),
                       COALESCE(SUM(exp_gained), 0), COALESCE(SUM(currency_gained), 0)
                FROM hunt_records
            """)
            count, seconds, exp_gained, currency_gained = cursor.fetchone()

            stats = {
                "total_sessions": count,
                "total_seconds": seconds,
                "total_exp_gained": exp_gained,
                "total_currency_gained": currency_gained,
            }

            # Rates over total hunting time, not a mean of per-session rates
            if seconds > 0:
                stats["avg_exp_per_hour"] = round(exp_gained / (seconds / 3600))
                stats["avg_currency_per_hour"] = round(currency_gained / (seconds / 3600))
            else:
                stats["avg_exp_per_hour"] = 0
                stats["avg_currency_per_hour"] = 0

            return stats

        except sqlite3.Error as e:
            logger.error(f"DatabaseService: Error getting stats: {e}")
            return {}

    @staticmethod
    def _row_to_record(row) -> SessionRecord:
        (record_id, started_at, ended_at, start_time, end_time, duration,
         exp_start, exp_end, exp_gained, exp_per_hour,
         cur_start, cur_end, cur_gained, cur_per_hour, memo) = row
        return SessionRecord(
            id=record_id,
            started_at=started_at,
            ended_at=ended_at,
            start_time=start_time,
            end_time=end_time,
            duration_seconds=duration,
            exp=RecordStats(exp_start, exp_end, exp_gained, exp_per_hour),
            currency=RecordStats(cur_start, cur_end, cur_gained, cur_per_hour),
            memo=memo,
        )
