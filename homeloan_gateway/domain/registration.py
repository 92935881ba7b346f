"""Bank-agent registration lifecycle: candidate submission and admin decision"""

from datetime import date, datetime
from typing import Dict, Optional

from homeloan_gateway.domain.exceptions import (
    FieldValidationError,
    InvalidTransitionError,
    RecordNotFoundError,
    StaleStateError,
)
from homeloan_gateway.domain.models import (
    BankAgentRegistration,
    RegistrationCandidate,
    RegistrationStatus,
)
from homeloan_gateway.domain.ports import RegistrationStore
from homeloan_gateway.domain.validation import (
    age_at_least,
    is_employee_id,
    is_national_id,
    is_phone,
    is_postal_code,
    parse_dmy,
    required_non_empty,
)
from homeloan_gateway.utils.date_utils import age_on, utcnow

ENTITY = "registration"

# pending is the only non-terminal status
VALID_TRANSITIONS: Dict[RegistrationStatus, frozenset] = {
    RegistrationStatus.PENDING: frozenset({RegistrationStatus.APPROVED, RegistrationStatus.REJECTED}),
    RegistrationStatus.APPROVED: frozenset(),
    RegistrationStatus.REJECTED: frozenset(),
}


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class RegistrationWorkflow:
    """
    Governs one registration record per user.

    Submissions are validated field by field and stored as pending. An
    administrator then approves or rejects exactly once; the write is
    conditional on the record still being pending so two concurrent
    decisions cannot both land.
    """

    def __init__(self, store: RegistrationStore, minimum_age: int = 20):
        self.store = store
        self.minimum_age = minimum_age

    def validate(self, candidate: RegistrationCandidate, today: date | None = None) -> Dict[str, str]:
        """Return field -> reason for every problem with the candidate (empty when valid)"""
        personal = candidate.personal
        employment = candidate.employment
        errors: Dict[str, str] = {}

        missing = required_non_empty(
            {
                "user_id": candidate.user_id,
                "first_name": personal.first_name,
                "last_name": personal.last_name,
                "date_of_birth": personal.date_of_birth,
                "national_id": personal.national_id,
                "phone": personal.phone,
                "address": personal.address,
                "city": personal.city,
                "bank_name": employment.bank_name,
                "position": employment.position,
                "employee_id": employment.employee_id,
                "department": employment.department,
                "supervisor_phone": employment.supervisor_phone,
            }
        )
        for field_name in missing:
            errors[field_name] = "This field is required"

        # Format checks only for fields that were filled in
        if "national_id" not in errors and not is_national_id(personal.national_id.strip()):
            errors["national_id"] = "National ID must be exactly 8 digits"
        if "phone" not in errors and not is_phone(personal.phone.strip()):
            errors["phone"] = "Phone number must be exactly 8 digits"
        if "supervisor_phone" not in errors and not is_phone(employment.supervisor_phone.strip()):
            errors["supervisor_phone"] = "Supervisor phone must be exactly 8 digits"
        if "employee_id" not in errors and not is_employee_id(employment.employee_id.strip()):
            errors["employee_id"] = "Employee ID must be exactly 6 digits"
        if not is_postal_code((personal.postal_code or "").strip()):
            errors["postal_code"] = "Postal code must be exactly 4 digits"

        if "date_of_birth" not in errors:
            birth_date = parse_dmy(personal.date_of_birth, today=today)
            if birth_date is None:
                errors["date_of_birth"] = "Date of birth must be a past date in DD/MM/YYYY format"
            elif not age_at_least(birth_date, self.minimum_age, today=today):
                errors["date_of_birth"] = f"Bank agents must be at least {self.minimum_age} years old"

        if _blank(candidate.documents.national_id_document):
            errors["national_id_document"] = "National ID scan is required"
        if _blank(candidate.documents.bank_employment_letter):
            errors["bank_employment_letter"] = "Bank employment letter is required"

        return errors

    def has_existing_registration(self, user_id: str) -> bool:
        """True when the user already has a pending or approved registration"""
        return self.store.find_active_by_user(user_id) is not None

    def submit(self, candidate: RegistrationCandidate, now: datetime | None = None) -> BankAgentRegistration:
        """
        Validate and store a new pending registration.

        Raises:
            FieldValidationError: One or more fields are invalid (nothing stored)
            DuplicateRegistrationError: Raised by the store when the user already
                has an active registration
        """
        now = now or utcnow()
        errors = self.validate(candidate, today=now.date())
        if errors:
            raise FieldValidationError(errors)

        personal = candidate.personal
        employment = candidate.employment
        registration = BankAgentRegistration(
            user_id=candidate.user_id.strip(),
            first_name=personal.first_name.strip(),
            last_name=personal.last_name.strip(),
            date_of_birth=parse_dmy(personal.date_of_birth, today=now.date()),
            national_id=personal.national_id.strip(),
            phone=personal.phone.strip(),
            address=personal.address.strip(),
            city=personal.city.strip(),
            postal_code=(personal.postal_code or "").strip() or None,
            bank_name=employment.bank_name.strip(),
            position=employment.position.strip(),
            employee_id=employment.employee_id.strip(),
            department=employment.department.strip(),
            work_address=(employment.work_address or "").strip() or None,
            supervisor_name=(employment.supervisor_name or "").strip() or None,
            supervisor_phone=employment.supervisor_phone.strip(),
            national_id_document=candidate.documents.national_id_document,
            bank_employment_letter=candidate.documents.bank_employment_letter,
            status=RegistrationStatus.PENDING,
            submitted_at=now,
        )
        return self.store.insert(registration)

    def decide(
        self,
        registration_id: str,
        outcome: RegistrationStatus,
        notes: str | None = None,
        rejection_reason: str | None = None,
        reviewed_by: str | None = None,
        now: datetime | None = None,
    ) -> BankAgentRegistration:
        """
        Approve or reject a pending registration.

        Raises:
            RecordNotFoundError: Unknown registration id
            InvalidTransitionError: Registration already decided, or outcome is not final
            FieldValidationError: Rejection without a reason
            StaleStateError: Another reviewer decided it between our read and write
        """
        outcome = RegistrationStatus(outcome)
        registration = self.store.get(registration_id)
        if registration is None:
            raise RecordNotFoundError(ENTITY, registration_id)

        current = registration.status
        if outcome not in VALID_TRANSITIONS[current]:
            raise InvalidTransitionError(ENTITY, current.value, outcome.value)

        if outcome == RegistrationStatus.REJECTED and _blank(rejection_reason):
            raise FieldValidationError({"rejection_reason": "A reason is required to reject a registration"})

        now = now or utcnow()
        changes = {
            "status": outcome,
            "reviewed_at": max(now, registration.submitted_at),
            "reviewed_by": reviewed_by,
            "admin_notes": notes,
            "rejection_reason": rejection_reason.strip() if outcome == RegistrationStatus.REJECTED else None,
        }
        updated = self.store.update_if_status(registration_id, current, changes)
        if updated is None:
            raise StaleStateError(ENTITY, registration_id, current.value)
        return updated

    def age(self, registration: BankAgentRegistration, today: date | None = None) -> int:
        """Age in whole years, derived from the stored date of birth"""
        return age_on(registration.date_of_birth, today or date.today())
