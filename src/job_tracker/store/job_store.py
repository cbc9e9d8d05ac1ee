"""SQLite-backed storage for tracked job applications and the user's CV."""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path

from job_tracker.models.analysis import AIAnalysisResult
from job_tracker.models.job import (
    Job,
    JobCreate,
    JobStats,
    JobStatus,
    JobUpdate,
    ParsedJob,
)

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".job-tracker" / "jobs.db"

LIST_FIELDS = ("responsibilities", "requirements", "benefits", "suggested_next_steps")
DATE_FIELDS = ("application_date", "ai_analyzed_at", "created_at", "updated_at")
SEARCH_FIELDS = ("company", "title", "location", "notes")
SORT_COLUMNS = {
    "application_date": "application_date",
    "company": "company COLLATE NOCASE",
    "title": "title COLLATE NOCASE",
    "status": "status",
    "suitability_score": "suitability_score",
    "created_at": "created_at",
}


class JobStore:
    """SQLite-backed store for job records with WAL mode."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS jobs (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    company TEXT NOT NULL,
                    description TEXT,
                    location TEXT,
                    application_date TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'APPLIED',
                    linkedin_contact_url TEXT,
                    linkedin_contact_name TEXT,
                    has_messaged_contact INTEGER NOT NULL DEFAULT 0,
                    notes TEXT,
                    salary_min REAL,
                    salary_max REAL,
                    salary_currency TEXT,
                    responsibilities TEXT NOT NULL DEFAULT '[]',
                    requirements TEXT NOT NULL DEFAULT '[]',
                    benefits TEXT NOT NULL DEFAULT '[]',
                    work_arrangement TEXT,
                    suitability_score REAL,
                    suitability_reason TEXT,
                    suggested_next_steps TEXT NOT NULL DEFAULT '[]',
                    ai_analyzed_at TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS user_cv (
                    id TEXT PRIMARY KEY,
                    content TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

    # --- Jobs -------------------------------------------------------------

    def create(self, data: JobCreate) -> Job:
        """Insert a single job."""
        record = self._new_record(data.model_dump())
        with self._connect() as conn:
            self._insert(conn, record)
        return self._to_job(record)

    def bulk_create(self, jobs: list[ParsedJob]) -> list[Job]:
        """Insert parsed jobs in one transaction, keeping their order."""
        records = [
            self._new_record({
                "title": job.title,
                "company": job.company,
                "application_date": job.application_date,
                "status": job.status,
                "location": job.location,
                "notes": job.notes,
            })
            for job in jobs
        ]
        with self._connect() as conn:
            for record in records:
                self._insert(conn, record)
        logger.info("Imported %d jobs", len(records))
        return [self._to_job(r) for r in records]

    def get(self, job_id: str) -> Job | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM jobs WHERE id = ?", (job_id,)).fetchone()
        return self._row_to_job(row) if row is not None else None

    def list_jobs(
        self,
        status: JobStatus | None = None,
        search: str | None = None,
        sort_by: str = "application_date",
        descending: bool = True,
    ) -> list[Job]:
        """List jobs filtered by status and a case-insensitive search term."""
        if sort_by not in SORT_COLUMNS:
            raise ValueError(
                f"Unknown sort key: {sort_by} (expected one of {', '.join(SORT_COLUMNS)})"
            )

        clauses: list[str] = []
        params: list = []
        if status is not None:
            clauses.append("status = ?")
            params.append(JobStatus(status).value)
        if search and search.strip():
            term = search.strip().lower()
            clauses.append(
                "(" + " OR ".join(f"instr(lower(coalesce({f}, '')), ?) > 0" for f in SEARCH_FIELDS) + ")"
            )
            params.extend([term] * len(SEARCH_FIELDS))

        sql = "SELECT * FROM jobs"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        column = SORT_COLUMNS[sort_by]
        direction = "DESC" if descending else "ASC"
        # NULL scores always sort last
        sql += f" ORDER BY {sort_by} IS NULL, {column} {direction}, created_at {direction}, rowid {direction}"

        with self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._row_to_job(row) for row in rows]

    def update(self, job_id: str, data: JobUpdate) -> Job | None:
        """Apply the fields set on ``data``; None if the job does not exist."""
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return self.get(job_id)
        changes["updated_at"] = datetime.now()
        return self._update_fields(job_id, changes)

    def delete(self, job_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM jobs WHERE id = ?", (job_id,))
            return cursor.rowcount > 0

    def clear(self) -> int:
        """Delete all jobs. Returns count of deleted rows."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM jobs")
            return cursor.rowcount

    def stats(self) -> JobStats:
        """Count jobs per status."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT status, COUNT(*) FROM jobs GROUP BY status"
            ).fetchall()
        counts = {row[0]: row[1] for row in rows}
        return JobStats(
            total=sum(counts.values()),
            applied=counts.get(JobStatus.APPLIED.value, 0),
            interviewing=counts.get(JobStatus.INTERVIEWING.value, 0),
            accepted=counts.get(JobStatus.ACCEPTED.value, 0),
            rejected=counts.get(JobStatus.REJECTED.value, 0),
        )

    def pending_analysis(self) -> list[Job]:
        """Jobs with a description that have not been analyzed yet."""
        with self._connect() as conn:
            rows = conn.execute(
                """SELECT * FROM jobs
                   WHERE description IS NOT NULL AND trim(description) != ''
                     AND ai_analyzed_at IS NULL
                   ORDER BY created_at, rowid"""
            ).fetchall()
        return [self._row_to_job(row) for row in rows]

    def apply_analysis(self, job_id: str, result: AIAnalysisResult) -> Job | None:
        """Store analysis fields on a job and stamp ``ai_analyzed_at``."""
        now = datetime.now()
        changes = result.model_dump(by_alias=False)
        changes["ai_analyzed_at"] = now
        changes["updated_at"] = now
        return self._update_fields(job_id, changes)

    # --- CV ---------------------------------------------------------------

    def get_cv(self) -> str | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT content FROM user_cv ORDER BY updated_at DESC LIMIT 1"
            ).fetchone()
        return row[0] if row is not None else None

    def save_cv(self, content: str) -> None:
        """Replace the stored CV (one CV per user)."""
        if not content or not content.strip():
            raise ValueError("CV content is required")
        now = datetime.now().isoformat()
        with self._connect() as conn:
            conn.execute("DELETE FROM user_cv")
            conn.execute(
                "INSERT INTO user_cv (id, content, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (uuid.uuid4().hex, content, now, now),
            )

    # --- Helpers ----------------------------------------------------------

    @staticmethod
    def _new_record(fields: dict) -> dict:
        now = datetime.now()
        record = {k: v for k, v in fields.items() if v is not None}
        record["id"] = uuid.uuid4().hex
        record.setdefault("application_date", now)
        record.setdefault("status", JobStatus.APPLIED)
        record.setdefault("has_messaged_contact", False)
        record["created_at"] = now
        record["updated_at"] = now
        return record

    @staticmethod
    def _to_db(key: str, value):
        if key in LIST_FIELDS:
            return json.dumps(value or [], ensure_ascii=False)
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, JobStatus):
            return value.value
        if isinstance(value, bool):
            return 1 if value else 0
        return value

    def _insert(self, conn: sqlite3.Connection, record: dict) -> None:
        columns = list(record)
        conn.execute(
            f"INSERT INTO jobs ({', '.join(columns)}) VALUES ({', '.join('?' * len(columns))})",
            [self._to_db(c, record[c]) for c in columns],
        )

    def _update_fields(self, job_id: str, changes: dict) -> Job | None:
        assignments = ", ".join(f"{column} = ?" for column in changes)
        params = [self._to_db(c, v) for c, v in changes.items()]
        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE jobs SET {assignments} WHERE id = ?", [*params, job_id]
            )
            if cursor.rowcount == 0:
                return None
        return self.get(job_id)

    @staticmethod
    def _to_job(record: dict) -> Job:
        return Job(**record)

    @staticmethod
    def _row_to_job(row: sqlite3.Row) -> Job:
        data = dict(row)
        for key in LIST_FIELDS:
            data[key] = json.loads(data[key] or "[]")
        data["has_messaged_contact"] = bool(data["has_messaged_contact"])
        return Job(**data)
