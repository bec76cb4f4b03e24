# healthcheck/services/assessment_store.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from healthcheck.chat.schema import AssessmentRecord
from healthcheck.db import SessionLocal
from healthcheck.models import SymptomAssessment


class AssessmentStore:
    """
    Archive of completed symptom checks.

    Records are appended once and never updated; the history view can
    list, open and delete them.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    @contextmanager
    def _session(self):
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def append(self, record: AssessmentRecord) -> str:
        """
        Persist a record and return its id.
        """
        data = record.model_dump(mode="json", exclude={"id", "created_at"})
        with self._session() as session:
            row = SymptomAssessment(created_at=record.created_at, **data)
            if record.id:
                row.id = record.id
            session.add(row)
            session.flush()  # to get row.id
            return row.id

    def list(self, limit: Optional[int] = None) -> List[AssessmentRecord]:
        """
        Records ordered newest first.
        """
        stmt = select(SymptomAssessment).order_by(
            SymptomAssessment.created_at.desc(), SymptomAssessment.id.asc()
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        with self._session() as session:
            return [AssessmentRecord.model_validate(row) for row in session.scalars(stmt)]

    def get(self, assessment_id: str) -> Optional[AssessmentRecord]:
        with self._session() as session:
            row = session.get(SymptomAssessment, assessment_id)
            if row is None:
                return None
            return AssessmentRecord.model_validate(row)

    def delete(self, assessment_id: str) -> bool:
        """
        Remove a record. Returns False if there was nothing to delete.
        """
        with self._session() as session:
            row = session.get(SymptomAssessment, assessment_id)
            if row is None:
                return False
            session.delete(row)
            return True
