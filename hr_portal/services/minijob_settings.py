"""Minijob earnings-limit settings.

All writes to ``minijob_settings`` go through MinijobSettingService so the
timeline rules in ``hr_portal.timeline`` hold after every commit. Every
mutation runs in one transaction that holds both a process-wide lock and a
database writer lock, and re-derives the ``is_active`` flags before committing.
"""

import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import text
from sqlmodel import Session, or_, select

from .. import timeline
from ..core.exceptions import ConflictError, NotFoundError
from ..models.minijob_setting import MinijobSetting
from ..timeline import Adjustment


logger = logging.getLogger(__name__)

# Check-then-act on the whole table: serialize every writer in this process
_timeline_lock = threading.Lock()

# Postgres advisory lock key for the minijob timeline
TIMELINE_LOCK_KEY = 0x4D4A4F42


@dataclass
class CreateResult:
    setting: MinijobSetting
    auto_adjusted: List[Adjustment] = field(default_factory=list)


@dataclass
class DeleteResult:
    deleted: Dict[str, Any]
    adjustments: List[Adjustment] = field(default_factory=list)


@dataclass
class RecalculationResult:
    changes: List[Adjustment] = field(default_factory=list)

    @property
    def changed_count(self) -> int:
        return len(self.changes)


class MinijobSettingService:
    """Effective-dated limit settings backed by a SQLModel session"""

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _write_transaction(self) -> Iterator[None]:
        with _timeline_lock:
            try:
                self._lock_timeline()
                yield
                self.session.commit()
            except Exception:
                self.session.rollback()
                raise

    def _lock_timeline(self) -> None:
        """Take the database-wide writer lock, held until commit or rollback.

        The process lock does not reach other workers. Row locks alone do not
        either: a writer inserting into a gap finds no row to lock.
        """
        connection = self.session.connection()
        dialect = connection.dialect.name
        if dialect == "sqlite":
            # pysqlite only opens a transaction before DML, so an open one already holds RESERVED
            if not connection.connection.dbapi_connection.in_transaction:
                connection.exec_driver_sql("BEGIN IMMEDIATE")
        elif dialect == "postgresql":
            connection.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": TIMELINE_LOCK_KEY})

    def _load_timeline(self) -> List[MinijobSetting]:
        stmt = (
            select(MinijobSetting)
            .order_by(MinijobSetting.valid_from.asc(), MinijobSetting.id.asc())
            .with_for_update()
        )
        return list(self.session.exec(stmt).all())

    def _apply(self, records: List[MinijobSetting], adjustments: List[Adjustment]) -> None:
        by_id = {r.id: r for r in records}
        now = datetime.utcnow()
        for adjustment in adjustments:
            record = by_id[adjustment.setting_id]
            record.valid_until = adjustment.new_valid_until
            record.updated_at = now
            self.session.add(record)

    def _sync_active_flags(self, records: List[MinijobSetting], today: date) -> Optional[MinijobSetting]:
        active = timeline.select_active(records, today)
        for record in records:
            flag = record is active
            if record.is_active != flag:
                record.is_active = flag
                self.session.add(record)
        return active

    def list_all(self) -> List[MinijobSetting]:
        stmt = select(MinijobSetting).order_by(
            MinijobSetting.valid_from.desc(), MinijobSetting.id.desc()
        )
        return list(self.session.exec(stmt).all())

    def get_current(self, today: date) -> Optional[MinijobSetting]:
        """Setting in effect on ``today``, computed from the dates alone."""
        stmt = (
            select(MinijobSetting)
            .where(MinijobSetting.valid_from <= today)
            .where(or_(MinijobSetting.valid_until.is_(None), MinijobSetting.valid_until >= today))
            .order_by(MinijobSetting.valid_from.desc(), MinijobSetting.id.desc())
        )
        return self.session.exec(stmt).first()

    def refresh_active_status(self, today: date) -> Optional[MinijobSetting]:
        with self._write_transaction():
            records = self._load_timeline()
            active = self._sync_active_flags(records, today)
            active_id = active.id if active is not None else None

        logger.info("Active minijob setting for %s: %s", today, active_id)
        if active is None:
            return None
        self.session.refresh(active)
        return active

    def create(
        self,
        monthly_limit: Decimal,
        description: str,
        valid_from: date,
        valid_until: Optional[date],
        today: date,
        created_by: Optional[uuid.UUID] = None,
    ) -> CreateResult:
        with self._write_transaction():
            records = self._load_timeline()
            try:
                adjustments = timeline.plan_create(records, valid_from, valid_until, today)
            except ConflictError as exc:
                logger.warning(
                    "Rejected minijob setting %s - %s: overlaps %s",
                    valid_from,
                    valid_until or "open",
                    [c["id"] for c in exc.conflicts],
                )
                raise
            self._apply(records, adjustments)

            setting = MinijobSetting(
                monthly_limit=monthly_limit,
                description=description,
                valid_from=valid_from,
                valid_until=valid_until,
                created_by=created_by,
            )
            self.session.add(setting)
            self.session.flush()

            self._sync_active_flags(records + [setting], today)

        self.session.refresh(setting)
        logger.info(
            "Created minijob setting %s (%s - %s), adjusted %s",
            setting.id,
            valid_from,
            valid_until or "open",
            [a.setting_id for a in adjustments],
        )
        return CreateResult(setting=setting, auto_adjusted=adjustments)

    def update(
        self,
        setting_id: int,
        monthly_limit: Decimal,
        description: str,
        valid_from: date,
        valid_until: Optional[date],
        today: date,
    ) -> MinijobSetting:
        with self._write_transaction():
            records = self._load_timeline()
            setting = next((r for r in records if r.id == setting_id), None)
            if setting is None:
                raise NotFoundError(f"Minijob setting {setting_id} not found")
            # Sibling overlap is not re-checked here; admins can repair via recalculate
            timeline.validate_period(valid_from, valid_until)

            setting.monthly_limit = monthly_limit
            setting.description = description
            setting.valid_from = valid_from
            setting.valid_until = valid_until
            setting.updated_at = datetime.utcnow()
            self.session.add(setting)

            self._sync_active_flags(records, today)

        self.session.refresh(setting)
        logger.info("Updated minijob setting %s (%s - %s)", setting_id, valid_from, valid_until or "open")
        return setting

    def delete(self, setting_id: int, today: date) -> DeleteResult:
        with self._write_transaction():
            records = self._load_timeline()
            target = next((r for r in records if r.id == setting_id), None)
            if target is None:
                raise NotFoundError(f"Minijob setting {setting_id} not found")

            adjustments = timeline.plan_delete(records, target, today)
            snapshot = target.model_dump()

            remaining = [r for r in records if r.id != setting_id]
            self._apply(remaining, adjustments)
            self.session.delete(target)
            self._sync_active_flags(remaining, today)

        logger.info(
            "Deleted minijob setting %s, adjusted %s",
            setting_id,
            [(a.setting_id, a.new_valid_until) for a in adjustments],
        )
        return DeleteResult(deleted=snapshot, adjustments=adjustments)

    def recalculate(self, today: date) -> RecalculationResult:
        with self._write_transaction():
            records = self._load_timeline()
            changes = timeline.plan_recalculation(records)
            self._apply(records, changes)
            self._sync_active_flags(records, today)

        logger.info("Recalculated minijob timeline: %d change(s)", len(changes))
        return RecalculationResult(changes=changes)
