# charterdesk/data_access/financial_reports_repository.py

from charterdesk.data_access.base_repository import BaseRepository
from charterdesk.data_access.database_manager import DatabaseManager
from charterdesk.business_logic.entities.financial_report_entity import FinancialReportEntity
import logging

logger = logging.getLogger(__name__)

class FinancialReportsRepository(BaseRepository[FinancialReportEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=FinancialReportEntity,
                         table_name="financial_reports")
