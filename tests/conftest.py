# tests/conftest.py

import pytest

from charterdesk.data_access.database_manager import DatabaseManager
from charterdesk.data_access.yachts_repository import YachtsRepository
from charterdesk.data_access.clients_repository import ClientsRepository
from charterdesk.data_access.agents_repository import AgentsRepository
from charterdesk.data_access.opportunities_repository import OpportunitiesRepository
from charterdesk.data_access.opportunity_logs_repository import OpportunityLogsRepository
from charterdesk.data_access.bookings_repository import BookingsRepository
from charterdesk.data_access.employees_repository import EmployeesRepository
from charterdesk.data_access.payrolls_repository import PayrollsRepository
from charterdesk.data_access.invoices_repository import InvoicesRepository
from charterdesk.data_access.ledger_entries_repository import LedgerEntriesRepository
from charterdesk.data_access.financial_reports_repository import FinancialReportsRepository
from charterdesk.business_logic.yacht_manager import YachtManager
from charterdesk.business_logic.client_manager import ClientManager
from charterdesk.business_logic.agent_manager import AgentManager
from charterdesk.business_logic.booking_manager import BookingManager
from charterdesk.business_logic.opportunity_manager import OpportunityManager
from charterdesk.business_logic.employee_manager import EmployeeManager
from charterdesk.business_logic.payroll_manager import PayrollManager
from charterdesk.business_logic.invoice_manager import InvoiceManager
from charterdesk.business_logic.ledger_manager import LedgerManager
from charterdesk.business_logic.financial_report_manager import FinancialReportManager
from charterdesk.business_logic.permissions import UserRole


@pytest.fixture
def db_manager(tmp_path):
    manager = DatabaseManager(str(tmp_path / "charterdesk_test.db"))
    manager.create_tables()
    return manager


@pytest.fixture
def yacht_manager(db_manager):
    return YachtManager(YachtsRepository(db_manager))


@pytest.fixture
def client_manager(db_manager):
    return ClientManager(ClientsRepository(db_manager))


@pytest.fixture
def agent_manager(db_manager):
    return AgentManager(AgentsRepository(db_manager))


@pytest.fixture
def booking_manager(db_manager, yacht_manager, agent_manager):
    return BookingManager(BookingsRepository(db_manager), yacht_manager, agent_manager)


@pytest.fixture
def opportunity_manager(db_manager, booking_manager, client_manager, agent_manager):
    return OpportunityManager(
        OpportunitiesRepository(db_manager),
        OpportunityLogsRepository(db_manager),
        booking_manager,
        client_manager=client_manager,
        agent_manager=agent_manager
    )


@pytest.fixture
def employee_manager(db_manager):
    return EmployeeManager(EmployeesRepository(db_manager))


@pytest.fixture
def payroll_manager(db_manager, employee_manager):
    return PayrollManager(PayrollsRepository(db_manager), employee_manager)


@pytest.fixture
def invoice_manager(db_manager, booking_manager):
    return InvoiceManager(InvoicesRepository(db_manager), booking_manager)


@pytest.fixture
def ledger_manager(db_manager):
    return LedgerManager(LedgerEntriesRepository(db_manager))


@pytest.fixture
def financial_report_manager(db_manager, ledger_manager):
    return FinancialReportManager(FinancialReportsRepository(db_manager), ledger_manager)


@pytest.fixture
def priced_yacht(yacht_manager):
    """A shared-cruise yacht selling adult seats at 150 and child seats at 75."""
    return yacht_manager.add_yacht(
        "Sea Breeze", capacity=40, private_hourly_rate="900",
        shared_packages={"adult": "150", "child": "75"},
        role=UserRole.ADMIN
    )
