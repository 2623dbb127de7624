# charterdesk/business_logic/entities/__init__.py
from .base_entity import BaseEntity
from .yacht_entity import YachtEntity
from .client_entity import ClientEntity
from .agent_entity import AgentEntity
from .opportunity_entity import OpportunityEntity
from .opportunity_log_entity import OpportunityLogEntity
from .booking_entity import BookingEntity
from .employee_entity import EmployeeEntity
from .payroll_entity import PayrollEntity
from .invoice_entity import InvoiceEntity
from .ledger_entry_entity import LedgerEntryEntity
from .financial_report_entity import FinancialReportEntity
__all__ = [
    "BaseEntity", "YachtEntity", "ClientEntity", "AgentEntity",
    "OpportunityEntity", "OpportunityLogEntity", "BookingEntity",
    "EmployeeEntity", "PayrollEntity", "InvoiceEntity",
    "LedgerEntryEntity", "FinancialReportEntity",
]
