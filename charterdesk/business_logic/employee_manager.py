# charterdesk/business_logic/employee_manager.py

from typing import Optional, List, Dict, Any
from datetime import date
from decimal import Decimal
import logging

from charterdesk.business_logic.entities.employee_entity import EmployeeEntity
from charterdesk.data_access.employees_repository import EmployeesRepository
from charterdesk.business_logic.calculations.money import Money
from charterdesk.constants import EmployeeStatus

logger = logging.getLogger(__name__)

SALARY_FIELDS = ("basic_salary", "allowance", "accommodation_allowance", "sales_commission", "bar_commission")


class EmployeeManager:
    def __init__(self, employees_repository: EmployeesRepository):
        """
        Initializes the EmployeeManager.
        :param employees_repository: An instance of EmployeesRepository.
        """
        if employees_repository is None: raise ValueError("employees_repository cannot be None")
        self.employees_repository = employees_repository

    def add_employee(self,
                     full_name: str,
                     basic_salary: Any = None,
                     designation: Optional[str] = None,
                     department: Optional[str] = None,
                     joining_date: Optional[date] = None,
                     status: EmployeeStatus = EmployeeStatus.ACTIVE,
                     **salary_components) -> Optional[EmployeeEntity]:
        """
        Adds an employee. Salary components (allowance, accommodation_allowance,
        sales_commission, bar_commission) become the defaults of new payrolls.
        """
        if not full_name or not full_name.strip():
            raise ValueError("Employee name cannot be empty.")
        unknown = set(salary_components) - set(SALARY_FIELDS)
        if unknown:
            raise ValueError(f"Unknown salary components: {', '.join(sorted(unknown))}")

        employee = EmployeeEntity(
            full_name=full_name.strip(),
            designation=designation,
            department=department,
            joining_date=joining_date,
            status=status,
            basic_salary=Money.of(basic_salary).as_decimal(),
            **{name: Money.of(value).as_decimal() for name, value in salary_components.items()}
        )
        try:
            created = self.employees_repository.add(employee)
            if created is None:
                raise ValueError(f"Employee '{full_name}' could not be saved.")
            logger.info(f"Employee '{created.full_name}' added with ID {created.id}.")
            return created
        except Exception as e:
            logger.error(f"Error adding employee '{full_name}': {e}", exc_info=True)
            raise

    def update_employee(self, employee_id: int, **kwargs) -> Optional[EmployeeEntity]:
        employee = self.employees_repository.get_by_id(employee_id)
        if not employee:
            raise ValueError(f"Employee with ID {employee_id} not found.")

        if "full_name" in kwargs:
            if not kwargs["full_name"] or not str(kwargs["full_name"]).strip():
                raise ValueError("Employee name cannot be empty.")
            employee.full_name = str(kwargs["full_name"]).strip()
        for name in ("designation", "department", "joining_date", "status"):
            if name in kwargs:
                setattr(employee, name, kwargs[name])
        for name in SALARY_FIELDS:
            if name in kwargs:
                setattr(employee, name, Money.of(kwargs[name]).as_decimal())

        updated = self.employees_repository.update(employee)
        if updated is None:
            raise ValueError(f"Employee with ID {employee_id} could not be updated.")
        logger.info(f"Employee ID {employee_id} updated.")
        return updated

    def get_employee_by_id(self, employee_id: int) -> Optional[EmployeeEntity]:
        return self.employees_repository.get_by_id(employee_id)

    def get_all_employees(self) -> List[EmployeeEntity]:
        return self.employees_repository.get_all(order_by="full_name")

    def get_active_employees(self) -> List[EmployeeEntity]:
        return self.employees_repository.get_active_employees()

    def get_payroll_defaults(self, employee_id: int) -> Dict[str, Decimal]:
        """Salary components of an employee, used to prefill a new payroll."""
        employee = self.employees_repository.get_by_id(employee_id)
        if not employee:
            raise ValueError(f"Employee with ID {employee_id} not found.")
        return {name: getattr(employee, name) for name in SALARY_FIELDS}
