# charterdesk/data_access/database_manager.py

import sqlite3
import logging
from enum import Enum
from typing import Type

from charterdesk.config import DATABASE_PATH
from charterdesk.constants import (
    OpportunityStage, OpportunityType, LeadSource, OpportunityLogType, PaymentMethod,
    CruiseType, BookingStatus, PaymentStatus, PayrollStatus, EmployeeStatus,
    InvoiceStatus, LedgerEntryType, SourceModule
)

logger = logging.getLogger(__name__)


def _enum_values(enum_cls: Type[Enum]) -> str:
    return ', '.join(f"'{member.value}'" for member in enum_cls)


class DatabaseManager:
    def __init__(self, db_path=DATABASE_PATH):
        self.db_path = db_path
        self.conn = None

    def __enter__(self):
        try:
            self.conn = sqlite3.connect(self.db_path)
            self.conn.row_factory = sqlite3.Row # Access columns by name
            self.conn.execute("PRAGMA foreign_keys = ON;") # Enforce foreign key constraints
            logger.debug(f"Database connection established to {self.db_path}")
            return self.conn
        except sqlite3.Error as e:
            logger.error(f"Error connecting to database {self.db_path}: {e}")
            raise

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.conn:
            if exc_type is not None:
                # release the write lock held by the failed statement
                self.conn.rollback()
                logger.debug("Transaction rolled back after a failed statement.")
            self.conn.close()
            self.conn = None
            logger.debug("Database connection closed.")

    def execute_query(self, query, params=None):
        try:
            with self as conn:
                cursor = conn.cursor()
                cursor.execute(query, params or ())
                conn.commit()
                return cursor
        except sqlite3.Error as e:
            logger.error(f"Query execution failed: {query} with params {params} - {e}")
            raise

    def fetch_one(self, query, params=None):
        try:
            with self as conn:
                cursor = conn.cursor()
                cursor.execute(query, params or ())
                return cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Fetch one failed: {query} with params {params} - {e}")
            raise

    def fetch_all(self, query, params=None):
        try:
            with self as conn:
                cursor = conn.cursor()
                cursor.execute(query, params or ())
                return cursor.fetchall()
        except sqlite3.Error as e:
            logger.error(f"Fetch all failed: {query} with params {params} - {e}")
            raise

    def create_tables(self):
        queries = [
            """
            CREATE TABLE IF NOT EXISTS yachts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                capacity INTEGER NOT NULL DEFAULT 0,
                private_hourly_rate REAL NOT NULL DEFAULT 0.0,
                shared_packages TEXT NOT NULL DEFAULT '{}', -- JSON: guest category -> unit price
                is_active INTEGER NOT NULL DEFAULT 1,
                description TEXT
            );
            """,
            """
            CREATE TABLE IF NOT EXISTS clients (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                client_name TEXT NOT NULL,
                phone TEXT,
                email TEXT,
                discount_percentage REAL NOT NULL DEFAULT 0.0
            );
            """,
            """
            CREATE TABLE IF NOT EXISTS agents (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                agent_name TEXT NOT NULL,
                phone TEXT,
                email TEXT,
                commission_percentage REAL NOT NULL DEFAULT 0.0,
                is_active INTEGER NOT NULL DEFAULT 1
            );
            """,
            """
            CREATE TABLE IF NOT EXISTS bookings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                ticket_number TEXT NOT NULL UNIQUE,
                cruise_type TEXT NOT NULL CHECK(cruise_type IN ({cruise_types})),
                yacht_id INTEGER,
                agent_id INTEGER,
                customer_name TEXT NOT NULL DEFAULT '',
                customer_phone TEXT,
                customer_email TEXT,
                travel_date TEXT,
                booking_date TEXT,
                guests TEXT NOT NULL DEFAULT '{{}}', -- JSON: guest category -> head count
                number_of_people INTEGER NOT NULL DEFAULT 0,
                free_tickets INTEGER NOT NULL DEFAULT 0,
                total_amount REAL NOT NULL DEFAULT 0.0,
                discount_percentage REAL NOT NULL DEFAULT 0.0,
                commission_amount REAL NOT NULL DEFAULT 0.0,
                net_amount REAL NOT NULL DEFAULT 0.0,
                paid_amount REAL NOT NULL DEFAULT 0.0,
                balance REAL NOT NULL DEFAULT 0.0,
                other_charges REAL NOT NULL DEFAULT 0.0,
                upgrade_cost REAL NOT NULL DEFAULT 0.0,
                status TEXT NOT NULL CHECK(status IN ({booking_statuses})),
                payment_status TEXT NOT NULL CHECK(payment_status IN ({payment_statuses})),
                payment_mode TEXT,
                notes TEXT,
                FOREIGN KEY (yacht_id) REFERENCES yachts(id) ON DELETE SET NULL,
                FOREIGN KEY (agent_id) REFERENCES agents(id) ON DELETE SET NULL
            );
            """.format(
                cruise_types=_enum_values(CruiseType),
                booking_statuses=_enum_values(BookingStatus),
                payment_statuses=_enum_values(PaymentStatus),
            ),
            """
            CREATE TABLE IF NOT EXISTS opportunities (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                opportunity_code TEXT NOT NULL UNIQUE,
                opportunity_type TEXT NOT NULL CHECK(opportunity_type IN ({types})),
                lead_source TEXT,
                stage TEXT NOT NULL CHECK(stage IN ({stages})),
                client_id INTEGER,
                agent_id INTEGER,
                yacht_id INTEGER,
                date_of_charter TEXT,
                duration_hours REAL NOT NULL DEFAULT 0.0,
                adults INTEGER NOT NULL DEFAULT 0,
                kids INTEGER NOT NULL DEFAULT 0,
                base_price REAL NOT NULL DEFAULT 0.0,
                vip_cost REAL NOT NULL DEFAULT 0.0,
                alcohol_cost REAL NOT NULL DEFAULT 0.0,
                catering_cost REAL NOT NULL DEFAULT 0.0,
                extra_hour_cost REAL NOT NULL DEFAULT 0.0,
                addons_total REAL NOT NULL DEFAULT 0.0,
                agent_discount_percentage REAL NOT NULL DEFAULT 0.0,
                client_discount_percentage REAL NOT NULL DEFAULT 0.0,
                vat_percentage REAL NOT NULL DEFAULT 0.0,
                probability_percentage REAL NOT NULL DEFAULT 0.0,
                advance_paid REAL NOT NULL DEFAULT 0.0,
                payment_method TEXT,
                subtotal REAL NOT NULL DEFAULT 0.0,
                vat_amount REAL NOT NULL DEFAULT 0.0,
                total_amount REAL NOT NULL DEFAULT 0.0,
                balance_amount REAL NOT NULL DEFAULT 0.0,
                expected_revenue REAL NOT NULL DEFAULT 0.0,
                converted_booking_id INTEGER,
                lost_reason TEXT,
                notes TEXT,
                FOREIGN KEY (client_id) REFERENCES clients(id) ON DELETE SET NULL,
                FOREIGN KEY (agent_id) REFERENCES agents(id) ON DELETE SET NULL,
                FOREIGN KEY (yacht_id) REFERENCES yachts(id) ON DELETE SET NULL,
                FOREIGN KEY (converted_booking_id) REFERENCES bookings(id) ON DELETE SET NULL
            );
            """.format(types=_enum_values(OpportunityType), stages=_enum_values(OpportunityStage)),
            """
            CREATE TABLE IF NOT EXISTS opportunity_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                opportunity_id INTEGER NOT NULL,
                message_type TEXT NOT NULL CHECK(message_type IN ({log_types})),
                message_content TEXT NOT NULL,
                previous_stage TEXT,
                new_stage TEXT,
                created_at TEXT NOT NULL,
                FOREIGN KEY (opportunity_id) REFERENCES opportunities(id) ON DELETE CASCADE
            );
            """.format(log_types=_enum_values(OpportunityLogType)),
            """
            CREATE TABLE IF NOT EXISTS employees (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                full_name TEXT NOT NULL,
                designation TEXT,
                department TEXT,
                joining_date TEXT,
                status TEXT NOT NULL CHECK(status IN ({statuses})),
                basic_salary REAL NOT NULL DEFAULT 0.0,
                allowance REAL NOT NULL DEFAULT 0.0,
                accommodation_allowance REAL NOT NULL DEFAULT 0.0,
                sales_commission REAL NOT NULL DEFAULT 0.0,
                bar_commission REAL NOT NULL DEFAULT 0.0
            );
            """.format(statuses=_enum_values(EmployeeStatus)),
            """
            CREATE TABLE IF NOT EXISTS payrolls (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                employee_id INTEGER NOT NULL,
                month TEXT NOT NULL,
                year INTEGER NOT NULL,
                basic_salary REAL NOT NULL DEFAULT 0.0,
                allowance REAL NOT NULL DEFAULT 0.0,
                accommodation_allowance REAL NOT NULL DEFAULT 0.0,
                sales_commission REAL NOT NULL DEFAULT 0.0,
                bar_commission REAL NOT NULL DEFAULT 0.0,
                overtime_amount REAL NOT NULL DEFAULT 0.0,
                deductions REAL NOT NULL DEFAULT 0.0,
                advance_salary REAL NOT NULL DEFAULT 0.0,
                absent_deduction REAL NOT NULL DEFAULT 0.0,
                total_earnings REAL NOT NULL DEFAULT 0.0,
                total_deductions REAL NOT NULL DEFAULT 0.0,
                net_salary REAL NOT NULL DEFAULT 0.0,
                payment_status TEXT NOT NULL CHECK(payment_status IN ({statuses})),
                payment_date TEXT,
                notes TEXT,
                FOREIGN KEY (employee_id) REFERENCES employees(id) ON DELETE RESTRICT
            );
            """.format(statuses=_enum_values(PayrollStatus)),
            """
            CREATE TABLE IF NOT EXISTS invoices (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                invoice_number TEXT NOT NULL UNIQUE,
                invoice_date TEXT NOT NULL,
                booking_id INTEGER,
                customer_name TEXT,
                due_date TEXT,
                amount REAL NOT NULL DEFAULT 0.0,
                tax_amount REAL NOT NULL DEFAULT 0.0,
                discount_amount REAL NOT NULL DEFAULT 0.0,
                final_amount REAL NOT NULL DEFAULT 0.0,
                status TEXT NOT NULL CHECK(status IN ({statuses})),
                payment_method TEXT,
                notes TEXT,
                FOREIGN KEY (booking_id) REFERENCES bookings(id) ON DELETE SET NULL
            );
            """.format(statuses=_enum_values(InvoiceStatus)),
            """
            CREATE TABLE IF NOT EXISTS ledger_entries (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                transaction_date TEXT NOT NULL,
                entry_type TEXT NOT NULL CHECK(entry_type IN ({entry_types})),
                amount REAL NOT NULL,
                source_module TEXT NOT NULL CHECK(source_module IN ({modules})),
                category TEXT,
                description TEXT,
                payment_method TEXT CHECK(payment_method IS NULL OR payment_method IN ({methods})),
                reference_id INTEGER
            );
            """.format(
                entry_types=_enum_values(LedgerEntryType),
                modules=_enum_values(SourceModule),
                methods=_enum_values(PaymentMethod),
            ),
            """
            CREATE TABLE IF NOT EXISTS financial_reports (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                report_period TEXT NOT NULL,
                total_income REAL NOT NULL DEFAULT 0.0,
                booking_income REAL NOT NULL DEFAULT 0.0,
                other_income REAL NOT NULL DEFAULT 0.0,
                total_expenses REAL NOT NULL DEFAULT 0.0,
                payroll_expenses REAL NOT NULL DEFAULT 0.0,
                purchase_expenses REAL NOT NULL DEFAULT 0.0,
                operational_expenses REAL NOT NULL DEFAULT 0.0,
                profit REAL NOT NULL DEFAULT 0.0,
                notes TEXT
            );
            """,
        ]
        try:
            with self as conn:
                for query in queries:
                    conn.execute(query)
                conn.commit()
            logger.info(f"All tables checked/created in {self.db_path}.")
        except sqlite3.Error as e:
            logger.error(f"Error creating tables: {e}", exc_info=True)
            raise
