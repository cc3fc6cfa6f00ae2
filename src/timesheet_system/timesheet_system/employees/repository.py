from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def select_active_ids(self) -> Sequence[int]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Employee]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError

    def create(self, *, name: str, email: str, username: str, is_admin: bool = False) -> int:
        raise NotImplementedError

    def update(self, employee_id: int, *, name: str, email: str, username: str, is_admin: bool) -> bool:
        raise NotImplementedError

    def set_active(self, employee_id: int, *, active: bool) -> bool:
        raise NotImplementedError
