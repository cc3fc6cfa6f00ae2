import pytest

from src.timesheet_system.timesheet_system.core.exceptions import NotFoundError, ValidationError
from src.timesheet_system.timesheet_system.employees.service import EmployeeService


@pytest.fixture
def service(employees):
    return EmployeeService(employees)


def test_create_and_list(service):
    new_id = service.create(name="  Ana  ", email="ana@example.com", username="ana")

    created = service.get(new_id)
    assert created.name == "Ana"
    assert [e.employee_id for e in service.list_active()] == [new_id]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": "", "email": "a@example.com", "username": "a"},
        {"name": "A", "email": "not-an-email", "username": "a"},
        {"name": "A", "email": "a@example.com", "username": " "},
    ],
)
def test_create_rejects_bad_input(service, kwargs):
    with pytest.raises(ValidationError):
        service.create(**kwargs)


def test_username_must_be_unique(service, employees):
    taken = employees.add("Bob")

    with pytest.raises(ValidationError, match="Username already exists"):
        service.create(name="Other", email="o@example.com", username=taken.username)

    mine = employees.add("Cid")
    with pytest.raises(ValidationError, match="Username already exists"):
        service.update(mine.employee_id, username=taken.username)


def test_update_keeps_unspecified_fields(service, employees):
    emp = employees.add("Dee")

    updated = service.update(emp.employee_id, name="Dee Dee", is_admin=True)

    assert updated.name == "Dee Dee"
    assert updated.email == emp.email
    assert updated.is_admin is True


def test_deactivate_is_soft_and_repeatable(service, employees):
    emp = employees.add("Eve")

    service.deactivate(emp.employee_id)
    service.deactivate(emp.employee_id)

    assert service.get(emp.employee_id).active is False
    assert service.list_active() == []


def test_unknown_employee(service):
    with pytest.raises(NotFoundError):
        service.get(42)
    with pytest.raises(NotFoundError):
        service.deactivate(42)


def test_email_must_be_unique(service, employees):
    taken = employees.add("Bob")

    with pytest.raises(ValidationError, match="Email already exists"):
        service.create(name="Other", email=taken.email.upper(), username="other")

    mine = employees.add("Cid")
    with pytest.raises(ValidationError, match="Email already exists"):
        service.update(mine.employee_id, email=taken.email)
    assert service.update(mine.employee_id, email=mine.email).email == mine.email
