"""Persistence interfaces consumed by the workflows"""

from typing import Any, Dict, List, Optional, Protocol

from homeloan_gateway.domain.models import (
    ApplicationStatus,
    BankAgentRegistration,
    LoanApplication,
    RegistrationStatus,
)


class RegistrationStore(Protocol):
    def get(self, registration_id: str) -> Optional[BankAgentRegistration]:
        ...

    def find_active_by_user(self, user_id: str) -> Optional[BankAgentRegistration]:
        ...

    def insert(self, registration: BankAgentRegistration) -> BankAgentRegistration:
        """Insert unless the user already has an active registration (DuplicateRegistrationError)"""
        ...

    def update_if_status(
        self,
        registration_id: str,
        expected: RegistrationStatus,
        changes: Dict[str, Any],
    ) -> Optional[BankAgentRegistration]:
        """Apply changes only while status still equals expected; None when it no longer does"""
        ...

    def list_all(self) -> List[BankAgentRegistration]:
        ...


class LoanApplicationStore(Protocol):
    def get(self, application_id: str) -> Optional[LoanApplication]:
        ...

    def insert(self, application: LoanApplication) -> LoanApplication:
        ...

    def update_if_status(
        self,
        application_id: str,
        expected: ApplicationStatus,
        changes: Dict[str, Any],
    ) -> Optional[LoanApplication]:
        ...

    def list_all(self) -> List[LoanApplication]:
        ...
