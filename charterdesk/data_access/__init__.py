# charterdesk/data_access/__init__.py

from .database_manager import DatabaseManager
from .base_repository import BaseRepository

# Repositories import their entities from business_logic, whose managers import
# the repositories back; import them by module path.
