# charterdesk/business_logic/payroll_manager.py

from typing import Optional, List, Dict, Any
from datetime import date
from decimal import Decimal
import logging

from charterdesk.business_logic.entities.payroll_entity import PayrollEntity
from charterdesk.data_access.payrolls_repository import PayrollsRepository
from charterdesk.business_logic.employee_manager import EmployeeManager
from charterdesk.business_logic.calculations.money import Money, to_int
from charterdesk.business_logic.calculations.derived_fields import derive_payroll_fields
from charterdesk.constants import PayrollStatus, MONTHS

logger = logging.getLogger(__name__)

EARNING_FIELDS = ("basic_salary", "allowance", "accommodation_allowance",
                  "sales_commission", "bar_commission", "overtime_amount")
DEDUCTION_FIELDS = ("deductions", "advance_salary", "absent_deduction")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class PayrollManager:
    def __init__(self,
                 payrolls_repository: PayrollsRepository,
                 employee_manager: EmployeeManager):

        if payrolls_repository is None: raise ValueError("payrolls_repository cannot be None")
        if employee_manager is None: raise ValueError("employee_manager cannot be None")

        self.payrolls_repository = payrolls_repository
        self.employee_manager = employee_manager

    @staticmethod
    def _validate_period(month: str, year: Any) -> int:
        if month not in MONTHS:
            raise ValueError(f"Invalid payroll month: '{month}'.")
        year_value = to_int(year)
        if year_value <= 0:
            raise ValueError(f"Invalid payroll year: '{year}'.")
        return year_value

    def _apply_totals(self, payroll: PayrollEntity) -> PayrollEntity:
        derived = derive_payroll_fields({name: getattr(payroll, name) for name in EARNING_FIELDS + DEDUCTION_FIELDS})
        payroll.total_earnings = derived["total_earnings"]
        payroll.total_deductions = derived["total_deductions"]
        payroll.net_salary = derived["net_salary"]
        if payroll.net_salary < 0:
            logger.warning(f"Payroll for employee ID {payroll.employee_id} ({payroll.period_label}) "
                           f"has a negative net salary of {payroll.net_salary}.")
        return payroll

    def generate_payroll(self,
                         employee_id: int,
                         month: str,
                         year: Any,
                         notes: Optional[str] = None,
                         **raw_fields) -> PayrollEntity:
        """
        Creates a pending payroll for one employee and month.
        Earnings left blank are filled from the employee's salary package; the
        totals and net salary are always computed here, never taken from the caller.
        """
        year_value = self._validate_period(month, year)
        unknown = set(raw_fields) - set(EARNING_FIELDS + DEDUCTION_FIELDS)
        if unknown:
            raise ValueError(f"Unknown payroll fields: {', '.join(sorted(unknown))}")

        defaults = self.employee_manager.get_payroll_defaults(employee_id)
        employee = self.employee_manager.get_employee_by_id(employee_id)
        if employee and not employee.is_active:
            logger.warning(f"Generating payroll for inactive employee ID {employee_id}.")
        if self.payrolls_repository.get_for_period(employee_id, month, year_value):
            logger.warning(f"Employee ID {employee_id} already has a payroll for {month} {year_value}.")

        values: Dict[str, Decimal] = {}
        for name in EARNING_FIELDS + DEDUCTION_FIELDS:
            raw = raw_fields.get(name)
            if _is_blank(raw) and name in defaults:
                raw = defaults[name]
            values[name] = Money.of(raw).as_decimal()

        payroll = self._apply_totals(PayrollEntity(
            employee_id=employee_id,
            month=month,
            year=year_value,
            payment_status=PayrollStatus.PENDING,
            notes=notes,
            **values
        ))

        try:
            created = self.payrolls_repository.add(payroll)
            if created is None:
                raise ValueError(f"Payroll for employee ID {employee_id} could not be saved.")
            logger.info(f"Payroll ID {created.id} generated for employee ID {employee_id} for {created.period_label}. "
                        f"Net Salary: {created.net_salary}")
            return created
        except Exception as e:
            logger.error(f"Error generating payroll for employee ID {employee_id}: {e}", exc_info=True)
            raise

    def update_payroll(self, payroll_id: int, **kwargs) -> PayrollEntity:
        payroll = self._get_existing(payroll_id)

        if "month" in kwargs or "year" in kwargs:
            payroll.year = self._validate_period(kwargs.get("month", payroll.month), kwargs.get("year", payroll.year))
            payroll.month = kwargs.get("month", payroll.month)
        for name in EARNING_FIELDS + DEDUCTION_FIELDS:
            if name in kwargs:
                setattr(payroll, name, Money.of(kwargs[name]).as_decimal())
        if "notes" in kwargs:
            payroll.notes = kwargs["notes"]

        self._apply_totals(payroll)
        updated = self.payrolls_repository.update(payroll)
        if updated is None:
            raise ValueError(f"Payroll ID {payroll_id} could not be updated.")
        logger.info(f"Payroll ID {payroll_id} updated. Net Salary: {updated.net_salary}")
        return updated

    def _get_existing(self, payroll_id: int) -> PayrollEntity:
        if not isinstance(payroll_id, int) or payroll_id <= 0:
            raise ValueError("Invalid payroll ID.")
        payroll = self.payrolls_repository.get_by_id(payroll_id)
        if not payroll:
            raise ValueError(f"Payroll with ID {payroll_id} not found.")
        return payroll

    def mark_as_paid(self, payroll_id: int, payment_date: Optional[date] = None) -> PayrollEntity:
        payroll = self._get_existing(payroll_id)
        if payroll.is_paid:
            logger.warning(f"Payroll ID {payroll_id} has already been paid on {payroll.payment_date}.")
            return payroll

        payroll.payment_status = PayrollStatus.PAID
        payroll.payment_date = payment_date or date.today()
        updated = self.payrolls_repository.update(payroll)
        if updated is None:
            raise ValueError(f"Payroll ID {payroll_id} could not be marked as paid.")
        logger.info(f"Payroll ID {payroll_id} paid on {updated.payment_date}. Amount: {updated.net_salary}")
        return updated

    def put_on_hold(self, payroll_id: int) -> PayrollEntity:
        payroll = self._get_existing(payroll_id)
        if payroll.is_paid:
            raise ValueError(f"Payroll ID {payroll_id} is already paid and cannot be put on hold.")
        if payroll.payment_status == PayrollStatus.HOLD:
            return payroll
        payroll.payment_status = PayrollStatus.HOLD
        updated = self.payrolls_repository.update(payroll)
        if updated is None:
            raise ValueError(f"Payroll ID {payroll_id} could not be put on hold.")
        logger.info(f"Payroll ID {payroll_id} put on hold.")
        return updated

    def get_payroll_by_id(self, payroll_id: int) -> Optional[PayrollEntity]:
        return self.payrolls_repository.get_by_id(payroll_id)

    def get_payrolls(self, employee_id: Optional[int] = None,
                     status: Optional[PayrollStatus] = None) -> List[PayrollEntity]:
        if employee_id is not None:
            payrolls = self.payrolls_repository.get_by_employee_id(employee_id)
            return [p for p in payrolls if status is None or p.payment_status == status]
        if status is not None:
            return self.payrolls_repository.get_by_status(status)
        return self.payrolls_repository.get_all(order_by="year DESC, id DESC")

    def delete_payroll(self, payroll_id: int) -> bool:
        payroll = self._get_existing(payroll_id)
        if payroll.is_paid:
            raise ValueError(f"Payroll ID {payroll_id} has been paid and cannot be deleted.")
        deleted = self.payrolls_repository.delete(payroll_id)
        if deleted:
            logger.info(f"Payroll ID {payroll_id} deleted.")
        return deleted

    def get_payroll_totals(self) -> Dict[str, Any]:
        payrolls = self.payrolls_repository.get_all()
        by_status = {status: Money.zero() for status in PayrollStatus}
        for payroll in payrolls:
            by_status[payroll.payment_status] = by_status[payroll.payment_status] + payroll.net_salary
        return {
            "count": len(payrolls),
            "total_net_salary": Money.total(p.net_salary for p in payrolls).as_decimal(),
            "paid": by_status[PayrollStatus.PAID].as_decimal(),
            "pending": by_status[PayrollStatus.PENDING].as_decimal(),
            "hold": by_status[PayrollStatus.HOLD].as_decimal(),
        }
