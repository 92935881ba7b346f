"""Data access layer for registrations and loan applications"""

import uuid
from dataclasses import fields
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from homeloan_gateway.infrastructure.database.models import BankAgentRegistrationRecord, LoanApplicationRecord
from homeloan_gateway.domain.exceptions import DuplicateRegistrationError
from homeloan_gateway.domain.models import (
    ACTIVE_REGISTRATION_STATUSES,
    ApplicationStatus,
    BankAgentRegistration,
    LoanApplication,
    RegistrationStatus,
)
from homeloan_gateway.utils.date_utils import ensure_utc

_REGISTRATION_FIELDS = [f.name for f in fields(BankAgentRegistration)]
_APPLICATION_FIELDS = [f.name for f in fields(LoanApplication)]


def _parse_uuid(record_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(record_id))
    except ValueError:
        return None


def _column_values(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Status enums are stored as their plain string value"""
    return {key: value.value if isinstance(value, Enum) else value for key, value in changes.items()}


def _to_registration(row: BankAgentRegistrationRecord) -> BankAgentRegistration:
    values = {name: getattr(row, name) for name in _REGISTRATION_FIELDS}
    values["id"] = str(row.id)
    values["status"] = RegistrationStatus(row.status)
    values["submitted_at"] = ensure_utc(row.submitted_at)
    values["reviewed_at"] = ensure_utc(row.reviewed_at)
    return BankAgentRegistration(**values)


def _to_application(row: LoanApplicationRecord) -> LoanApplication:
    values = {name: getattr(row, name) for name in _APPLICATION_FIELDS}
    values["id"] = str(row.id)
    values["status"] = ApplicationStatus(row.status)
    values["created_at"] = ensure_utc(row.created_at)
    values["updated_at"] = ensure_utc(row.updated_at)
    return LoanApplication(**values)


class RegistrationRepository:
    """Repository for bank-agent registrations"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, registration_id: str) -> Optional[BankAgentRegistration]:
        """Fetch a registration by id (None for unknown or malformed ids)"""
        row = self._get_row(registration_id)
        return _to_registration(row) if row else None

    def find_active_by_user(self, user_id: str) -> Optional[BankAgentRegistration]:
        row = (
            self.db.query(BankAgentRegistrationRecord)
            .filter(
                BankAgentRegistrationRecord.user_id == user_id,
                BankAgentRegistrationRecord.status.in_([s.value for s in ACTIVE_REGISTRATION_STATUSES]),
            )
            .first()
        )
        return _to_registration(row) if row else None

    def insert(self, registration: BankAgentRegistration) -> BankAgentRegistration:
        """
        Persist a new registration.

        The partial unique index on (user_id) for active statuses turns this
        into an atomic insert-if-absent.

        Raises:
            DuplicateRegistrationError: User already has a pending/approved registration
        """
        values = {name: getattr(registration, name) for name in _REGISTRATION_FIELDS if name != "id"}
        db_registration = BankAgentRegistrationRecord(**_column_values(values))
        try:
            # Savepoint: a losing insert must not discard the caller's transaction
            with self.db.begin_nested():
                self.db.add(db_registration)
        except IntegrityError:
            if self.find_active_by_user(registration.user_id) is not None:
                raise DuplicateRegistrationError(registration.user_id)
            raise
        return _to_registration(db_registration)

    def update_if_status(
        self,
        registration_id: str,
        expected: RegistrationStatus,
        changes: Dict[str, Any],
    ) -> Optional[BankAgentRegistration]:
        """Compare-and-swap on status: UPDATE ... WHERE id = :id AND status = :expected"""
        record_id = _parse_uuid(registration_id)
        if record_id is None:
            return None

        updated = (
            self.db.query(BankAgentRegistrationRecord)
            .filter(
                BankAgentRegistrationRecord.id == record_id,
                BankAgentRegistrationRecord.status == RegistrationStatus(expected).value,
            )
            .update(_column_values(changes), synchronize_session=False)
        )
        if updated == 0:
            return None

        row = (
            self.db.query(BankAgentRegistrationRecord)
            .populate_existing()
            .filter(BankAgentRegistrationRecord.id == record_id)
            .one()
        )
        return _to_registration(row)

    def list_all(self) -> List[BankAgentRegistration]:
        return [_to_registration(row) for row in self.db.query(BankAgentRegistrationRecord).all()]

    def list_registrations(
        self,
        user_id: str | None = None,
        status: RegistrationStatus | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[BankAgentRegistration], int]:
        """Newest first, optionally filtered; returns (page, total matching)"""
        query = self.db.query(BankAgentRegistrationRecord)
        if user_id:
            query = query.filter(BankAgentRegistrationRecord.user_id == user_id)
        if status:
            query = query.filter(BankAgentRegistrationRecord.status == RegistrationStatus(status).value)

        total = query.count()
        rows = (
            query.order_by(BankAgentRegistrationRecord.submitted_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [_to_registration(row) for row in rows], total

    def _get_row(self, registration_id: str) -> Optional[BankAgentRegistrationRecord]:
        record_id = _parse_uuid(registration_id)
        if record_id is None:
            return None
        return (
            self.db.query(BankAgentRegistrationRecord)
            .filter(BankAgentRegistrationRecord.id == record_id)
            .first()
        )


class LoanApplicationRepository:
    """Repository for loan applications"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, application_id: str) -> Optional[LoanApplication]:
        record_id = _parse_uuid(application_id)
        if record_id is None:
            return None
        row = self.db.query(LoanApplicationRecord).filter(LoanApplicationRecord.id == record_id).first()
        return _to_application(row) if row else None

    def insert(self, application: LoanApplication) -> LoanApplication:
        values = {name: getattr(application, name) for name in _APPLICATION_FIELDS if name != "id"}
        db_application = LoanApplicationRecord(**_column_values(values))
        self.db.add(db_application)
        self.db.flush()
        return _to_application(db_application)

    def update_if_status(
        self,
        application_id: str,
        expected: ApplicationStatus,
        changes: Dict[str, Any],
    ) -> Optional[LoanApplication]:
        """Compare-and-swap on status; None when another writer got there first"""
        record_id = _parse_uuid(application_id)
        if record_id is None:
            return None

        updated = (
            self.db.query(LoanApplicationRecord)
            .filter(
                LoanApplicationRecord.id == record_id,
                LoanApplicationRecord.status == ApplicationStatus(expected).value,
            )
            .update(_column_values(changes), synchronize_session=False)
        )
        if updated == 0:
            return None

        row = (
            self.db.query(LoanApplicationRecord)
            .populate_existing()
            .filter(LoanApplicationRecord.id == record_id)
            .one()
        )
        return _to_application(row)

    def list_all(self) -> List[LoanApplication]:
        return [_to_application(row) for row in self.db.query(LoanApplicationRecord).all()]

    def list_applications(
        self,
        applicant_id: str | None = None,
        bank_agent_id: str | None = None,
        status: ApplicationStatus | None = None,
        limit: int = 50,
    ) -> List[LoanApplication]:
        """Fetch recent applications, newest first"""
        query = self.db.query(LoanApplicationRecord)
        if applicant_id:
            query = query.filter(LoanApplicationRecord.applicant_id == applicant_id)
        if bank_agent_id:
            query = query.filter(LoanApplicationRecord.bank_agent_id == bank_agent_id)
        if status:
            query = query.filter(LoanApplicationRecord.status == ApplicationStatus(status).value)

        rows = query.order_by(LoanApplicationRecord.created_at.desc()).limit(limit).all()
        return [_to_application(row) for row in rows]
