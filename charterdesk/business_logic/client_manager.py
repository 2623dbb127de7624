# charterdesk/business_logic/client_manager.py

from typing import Optional, List, Any
import logging

from charterdesk.business_logic.entities.client_entity import ClientEntity
from charterdesk.data_access.clients_repository import ClientsRepository
from charterdesk.business_logic.calculations.money import to_decimal

logger = logging.getLogger(__name__)


class ClientManager:
    def __init__(self, clients_repository: ClientsRepository):
        if clients_repository is None:
            raise ValueError("clients_repository cannot be None")
        self.clients_repository = clients_repository

    def add_client(self, client_name: str, phone: Optional[str] = None,
                   email: Optional[str] = None, discount_percentage: Any = None) -> Optional[ClientEntity]:
        if not client_name or not client_name.strip():
            raise ValueError("Client name cannot be empty.")
        client = ClientEntity(
            client_name=client_name.strip(),
            phone=phone,
            email=email,
            discount_percentage=to_decimal(discount_percentage)
        )
        created = self.clients_repository.add(client)
        if created is None:
            raise ValueError(f"Client '{client_name}' could not be saved.")
        logger.info(f"Client '{created.client_name}' added with ID {created.id}.")
        return created

    def update_client(self, client_id: int, **kwargs) -> Optional[ClientEntity]:
        client = self.clients_repository.get_by_id(client_id)
        if not client:
            raise ValueError(f"Client with ID {client_id} not found.")
        if "client_name" in kwargs:
            if not kwargs["client_name"] or not str(kwargs["client_name"]).strip():
                raise ValueError("Client name cannot be empty.")
            client.client_name = str(kwargs["client_name"]).strip()
        if "phone" in kwargs: client.phone = kwargs["phone"]
        if "email" in kwargs: client.email = kwargs["email"]
        if "discount_percentage" in kwargs:
            client.discount_percentage = to_decimal(kwargs["discount_percentage"])
        updated = self.clients_repository.update(client)
        if updated is None:
            raise ValueError(f"Client with ID {client_id} could not be updated.")
        logger.info(f"Client ID {client_id} updated.")
        return updated

    def get_client_by_id(self, client_id: int) -> Optional[ClientEntity]:
        return self.clients_repository.get_by_id(client_id)

    def get_all_clients(self) -> List[ClientEntity]:
        return self.clients_repository.get_all(order_by="client_name")

    def search_clients(self, name_part: str) -> List[ClientEntity]:
        return self.clients_repository.search_by_name(name_part or "")

    def delete_client(self, client_id: int) -> bool:
        if not self.clients_repository.get_by_id(client_id):
            raise ValueError(f"Client with ID {client_id} not found.")
        return self.clients_repository.delete(client_id)
