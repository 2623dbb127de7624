# charterdesk/main_app.py
import os
import sys
import logging
import logging.config
from PyQt5.QtWidgets import QApplication, QMainWindow, QTabWidget, QMessageBox
from PyQt5.QtCore import QLocale

# --- Configuration and Constants ---
from charterdesk.config import DATABASE_PATH, LOGS_DIR, LOGGING_CONFIG, APP_NAME, COMPANY_NAME, USER_ROLE
from charterdesk.constants import CruiseType
from charterdesk.business_logic.permissions import normalize_role

# --- Data Access Layer (DAL) ---
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

# --- Business Logic Layer (BLL) ---
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

# --- Presentation Layer (UI Tabs) ---
from charterdesk.presentation.opportunities_ui import OpportunitiesUI
from charterdesk.presentation.bookings_ui import BookingsUI
from charterdesk.presentation.parties_ui import PartiesUI
from charterdesk.presentation.yachts_ui import YachtsUI
from charterdesk.presentation.employees_ui import EmployeesUI
from charterdesk.presentation.payroll_ui import PayrollUI
from charterdesk.presentation.invoices_ui import InvoicesUI
from charterdesk.presentation.finance_ui import FinanceUI

logger = logging.getLogger(__name__)


def setup_logging():
    os.makedirs(LOGS_DIR, exist_ok=True)
    logging.config.dictConfig(LOGGING_CONFIG)


class MainWindow(QMainWindow):
    def __init__(self, user_role=USER_ROLE, parent=None):
        super().__init__(parent)
        self.user_role = normalize_role(user_role)
        role_name = self.user_role.value if self.user_role else "no role"
        self.setWindowTitle(f"{APP_NAME} - {COMPANY_NAME} ({role_name})")
        self.setGeometry(100, 100, 1300, 800)

        logger.info("Initializing Database Manager and creating tables...")
        self.db_manager = DatabaseManager(DATABASE_PATH)
        try:
            self.db_manager.create_tables()
            logger.info("Database tables checked/created successfully.")
        except Exception as e:
            logger.error(f"FATAL: Could not initialize database: {e}", exc_info=True)
            QMessageBox.critical(self, "Database error", f"Could not create or open the database: {e}")
            sys.exit(1)

        logger.info("Initializing Repositories...")
        self.yachts_repo = YachtsRepository(self.db_manager)
        self.clients_repo = ClientsRepository(self.db_manager)
        self.agents_repo = AgentsRepository(self.db_manager)
        self.opportunities_repo = OpportunitiesRepository(self.db_manager)
        self.opportunity_logs_repo = OpportunityLogsRepository(self.db_manager)
        self.bookings_repo = BookingsRepository(self.db_manager)
        self.employees_repo = EmployeesRepository(self.db_manager)
        self.payrolls_repo = PayrollsRepository(self.db_manager)
        self.invoices_repo = InvoicesRepository(self.db_manager)
        self.ledger_entries_repo = LedgerEntriesRepository(self.db_manager)
        self.financial_reports_repo = FinancialReportsRepository(self.db_manager)

        logger.info("Initializing Managers...")
        self.yacht_manager = YachtManager(self.yachts_repo)
        self.client_manager = ClientManager(self.clients_repo)
        self.agent_manager = AgentManager(self.agents_repo)
        self.booking_manager = BookingManager(
            bookings_repository=self.bookings_repo,
            yacht_manager=self.yacht_manager,
            agent_manager=self.agent_manager
        )
        self.opportunity_manager = OpportunityManager(
            opportunities_repository=self.opportunities_repo,
            opportunity_logs_repository=self.opportunity_logs_repo,
            booking_manager=self.booking_manager,
            client_manager=self.client_manager,
            agent_manager=self.agent_manager
        )
        self.employee_manager = EmployeeManager(self.employees_repo)
        self.payroll_manager = PayrollManager(
            payrolls_repository=self.payrolls_repo,
            employee_manager=self.employee_manager
        )
        self.invoice_manager = InvoiceManager(self.invoices_repo, booking_manager=self.booking_manager)
        self.ledger_manager = LedgerManager(self.ledger_entries_repo)
        self.financial_report_manager = FinancialReportManager(
            self.financial_reports_repo, ledger_manager=self.ledger_manager
        )

        logger.info("Setting up UI...")
        self._setup_ui()
        logger.info(f"MainWindow initialized for role '{role_name}'.")

    def _setup_ui(self):
        self.tabs = QTabWidget()

        self.opportunities_tab = OpportunitiesUI(
            opportunity_manager=self.opportunity_manager,
            client_manager=self.client_manager,
            agent_manager=self.agent_manager,
            yacht_manager=self.yacht_manager,
            user_role=self.user_role
        )
        self.tabs.addTab(self.opportunities_tab, "Opportunities")

        self.shared_bookings_tab = BookingsUI(
            booking_manager=self.booking_manager,
            yacht_manager=self.yacht_manager,
            agent_manager=self.agent_manager,
            cruise_type=CruiseType.SHARED,
            user_role=self.user_role
        )
        self.tabs.addTab(self.shared_bookings_tab, "Shared cruises")

        self.private_bookings_tab = BookingsUI(
            booking_manager=self.booking_manager,
            yacht_manager=self.yacht_manager,
            agent_manager=self.agent_manager,
            cruise_type=CruiseType.PRIVATE,
            user_role=self.user_role
        )
        self.tabs.addTab(self.private_bookings_tab, "Private charters")

        self.parties_tab = PartiesUI(self.client_manager, self.agent_manager, self.user_role)
        self.tabs.addTab(self.parties_tab, "Clients & agents")

        self.yachts_tab = YachtsUI(self.yacht_manager, self.user_role)
        self.tabs.addTab(self.yachts_tab, "Yachts")

        self.employees_tab = EmployeesUI(self.employee_manager)
        self.tabs.addTab(self.employees_tab, "Employees")

        self.payroll_tab = PayrollUI(self.payroll_manager, self.employee_manager)
        self.tabs.addTab(self.payroll_tab, "Payroll")

        self.invoices_tab = InvoicesUI(self.invoice_manager, self.booking_manager)
        self.tabs.addTab(self.invoices_tab, "Invoices")

        self.finance_tab = FinanceUI(self.ledger_manager, self.financial_report_manager)
        self.tabs.addTab(self.finance_tab, "Finance")

        self.setCentralWidget(self.tabs)


def main():
    setup_logging()
    logger.info("Application starting...")
    app = QApplication(sys.argv)
    QLocale.setDefault(QLocale(QLocale.Language.English, QLocale.Country.UnitedArabEmirates))

    main_window = MainWindow()
    main_window.show()
    logger.info("Application started successfully. Main window shown.")
    sys.exit(app.exec_())


if __name__ == '__main__':
    main()
