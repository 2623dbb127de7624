# tests/test_repositories.py

from datetime import date, datetime
from decimal import Decimal
import sqlite3

import pytest

from charterdesk.business_logic.entities.booking_entity import BookingEntity
from charterdesk.business_logic.entities.employee_entity import EmployeeEntity
from charterdesk.business_logic.entities.payroll_entity import PayrollEntity
from charterdesk.business_logic.entities.opportunity_entity import OpportunityEntity
from charterdesk.business_logic.entities.opportunity_log_entity import OpportunityLogEntity
from charterdesk.business_logic.entities.yacht_entity import YachtEntity
from charterdesk.constants import CruiseType, PaymentStatus, PaymentMethod, OpportunityLogType, OpportunityStage
from charterdesk.data_access.bookings_repository import BookingsRepository
from charterdesk.data_access.yachts_repository import YachtsRepository
from charterdesk.data_access.employees_repository import EmployeesRepository
from charterdesk.data_access.payrolls_repository import PayrollsRepository
from charterdesk.data_access.opportunities_repository import OpportunitiesRepository
from charterdesk.data_access.opportunity_logs_repository import OpportunityLogsRepository


def test_create_tables_is_repeatable(db_manager):
    db_manager.create_tables()
    names = {row["name"] for row in db_manager.fetch_all("SELECT name FROM sqlite_master WHERE type = 'table'")}
    assert {"yachts", "clients", "agents", "bookings", "opportunities", "opportunity_logs",
            "employees", "payrolls", "invoices", "ledger_entries", "financial_reports"} <= names


def test_booking_round_trip_keeps_types(db_manager):
    repo = BookingsRepository(db_manager)
    booking = repo.add(BookingEntity(
        ticket_number="TKT-1",
        cruise_type=CruiseType.SHARED,
        customer_name="Layla",
        travel_date=date(2025, 3, 14),
        guests={"adult": 4, "child": 2},
        total_amount=Decimal("892.50"),
        payment_status=PaymentStatus.PARTIAL,
        payment_mode=PaymentMethod.CARD
    ))
    assert booking.id is not None

    loaded = repo.get_by_id(booking.id)
    assert loaded.cruise_type is CruiseType.SHARED
    assert loaded.travel_date == date(2025, 3, 14)
    assert loaded.guests == {"adult": 4, "child": 2}
    assert loaded.total_amount == Decimal("892.50")
    assert loaded.payment_status is PaymentStatus.PARTIAL
    assert loaded.payment_mode is PaymentMethod.CARD
    assert loaded.customer_email is None


def test_yacht_packages_come_back_as_decimals(db_manager):
    repo = YachtsRepository(db_manager)
    yacht = repo.add(YachtEntity(name="Azure", shared_packages={"adult": Decimal("150.00")}, is_active=False))
    loaded = repo.get_by_name("Azure")
    assert loaded.id == yacht.id
    assert loaded.shared_packages == {"adult": Decimal("150")}
    assert loaded.is_active is False
    assert repo.get_active_yachts() == []


def test_update_and_delete_of_missing_rows(db_manager):
    repo = YachtsRepository(db_manager)
    assert repo.update(YachtEntity(name="Ghost")) is None
    assert repo.update(YachtEntity(name="Ghost", id=999)) is None
    assert repo.delete(999) is False
    assert repo.get_by_id(999) is None


def test_find_by_criteria_operators(db_manager):
    repo = EmployeesRepository(db_manager)
    for name, salary in (("Amir", "2000"), ("Bea", "3500"), ("Cyrus", "5000")):
        repo.add(EmployeeEntity(full_name=name, basic_salary=Decimal(salary)))

    assert [e.full_name for e in repo.find_by_criteria({"full_name": "Bea"})] == ["Bea"]
    above = repo.find_by_criteria({"basic_salary": (">", Decimal("2500"))}, order_by="full_name")
    assert [e.full_name for e in above] == ["Bea", "Cyrus"]
    between = repo.find_by_criteria({"basic_salary": ("BETWEEN", (2000, 3500))}, order_by="full_name")
    assert [e.full_name for e in between] == ["Amir", "Bea"]
    assert len(repo.find_by_criteria({})) == 3


def test_payroll_for_period_and_restrict_on_employee_delete(db_manager):
    employees = EmployeesRepository(db_manager)
    payrolls = PayrollsRepository(db_manager)
    employee = employees.add(EmployeeEntity(full_name="Dana"))
    payrolls.add(PayrollEntity(employee_id=employee.id, month="March", year=2025))

    assert payrolls.get_for_period(employee.id, "March", 2025) is not None
    assert payrolls.get_for_period(employee.id, "April", 2025) is None
    # payrolls keep their employee
    assert employees.delete(employee.id) is False
    with pytest.raises(sqlite3.IntegrityError):
        db_manager.execute_query("DELETE FROM employees WHERE id = ?", (employee.id,))


def test_store_stays_writable_after_a_failed_write(db_manager):
    employees = EmployeesRepository(db_manager)
    payrolls = PayrollsRepository(db_manager)
    employee = employees.add(EmployeeEntity(full_name="Dana"))
    payrolls.add(PayrollEntity(employee_id=employee.id, month="March", year=2025))

    assert employees.delete(employee.id) is False
    with pytest.raises(sqlite3.IntegrityError) as failed:
        db_manager.execute_query("DELETE FROM employees WHERE id = ?", (employee.id,))

    # the failed delete is still referenced through its traceback
    assert failed.value is not None
    second = employees.add(EmployeeEntity(full_name="Eve"))
    assert second is not None and second.id is not None
    assert employees.get_by_id(second.id).full_name == "Eve"
    assert employees.get_by_id(employee.id) is not None


def test_logs_are_removed_with_their_opportunity(db_manager):
    opportunities = OpportunitiesRepository(db_manager)
    logs = OpportunityLogsRepository(db_manager)
    opportunity = opportunities.add(OpportunityEntity(opportunity_code="OPC-2025-0001"))
    logs.add(OpportunityLogEntity(opportunity_id=opportunity.id, message_type=OpportunityLogType.NOTE,
                                  message_content="hello", created_at=datetime(2025, 1, 2, 9, 30)))

    loaded = logs.get_by_opportunity_id(opportunity.id)
    assert len(loaded) == 1
    assert loaded[0].created_at == datetime(2025, 1, 2, 9, 30)
    assert opportunities.get_by_stage(OpportunityStage.NEW)[0].opportunity_code == "OPC-2025-0001"

    assert opportunities.delete(opportunity.id) is True
    assert logs.get_by_opportunity_id(opportunity.id) == []
