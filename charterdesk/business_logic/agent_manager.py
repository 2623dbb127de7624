# charterdesk/business_logic/agent_manager.py

from typing import Optional, List, Any
import logging

from charterdesk.business_logic.entities.agent_entity import AgentEntity
from charterdesk.data_access.agents_repository import AgentsRepository
from charterdesk.business_logic.calculations.money import to_decimal
from charterdesk.business_logic.permissions import Permission, require_permission

logger = logging.getLogger(__name__)


class AgentManager:
    """Booking agents. Creating and editing needs create/edit_agent, deleting needs delete_agent."""

    def __init__(self, agents_repository: AgentsRepository):
        if agents_repository is None:
            raise ValueError("agents_repository cannot be None")
        self.agents_repository = agents_repository

    def add_agent(self, agent_name: str, role: Any, phone: Optional[str] = None,
                  email: Optional[str] = None, commission_percentage: Any = None) -> Optional[AgentEntity]:
        require_permission(role, Permission.CREATE_AGENT)
        if not agent_name or not agent_name.strip():
            raise ValueError("Agent name cannot be empty.")
        agent = AgentEntity(
            agent_name=agent_name.strip(),
            phone=phone,
            email=email,
            commission_percentage=to_decimal(commission_percentage)
        )
        created = self.agents_repository.add(agent)
        if created is None:
            raise ValueError(f"Agent '{agent_name}' could not be saved.")
        logger.info(f"Agent '{created.agent_name}' added with ID {created.id}.")
        return created

    def update_agent(self, agent_id: int, role: Any, **kwargs) -> Optional[AgentEntity]:
        require_permission(role, Permission.EDIT_AGENT)
        agent = self.agents_repository.get_by_id(agent_id)
        if not agent:
            raise ValueError(f"Agent with ID {agent_id} not found.")
        if "agent_name" in kwargs:
            if not kwargs["agent_name"] or not str(kwargs["agent_name"]).strip():
                raise ValueError("Agent name cannot be empty.")
            agent.agent_name = str(kwargs["agent_name"]).strip()
        if "phone" in kwargs: agent.phone = kwargs["phone"]
        if "email" in kwargs: agent.email = kwargs["email"]
        if "commission_percentage" in kwargs:
            agent.commission_percentage = to_decimal(kwargs["commission_percentage"])
        if "is_active" in kwargs: agent.is_active = bool(kwargs["is_active"])
        updated = self.agents_repository.update(agent)
        if updated is None:
            raise ValueError(f"Agent with ID {agent_id} could not be updated.")
        logger.info(f"Agent ID {agent_id} updated.")
        return updated

    def delete_agent(self, agent_id: int, role: Any) -> bool:
        require_permission(role, Permission.DELETE_AGENT)
        if not self.agents_repository.get_by_id(agent_id):
            raise ValueError(f"Agent with ID {agent_id} not found.")
        return self.agents_repository.delete(agent_id)

    def get_agent_by_id(self, agent_id: int) -> Optional[AgentEntity]:
        return self.agents_repository.get_by_id(agent_id)

    def get_all_agents(self, active_only: bool = False) -> List[AgentEntity]:
        if active_only:
            return self.agents_repository.get_active_agents()
        return self.agents_repository.get_all(order_by="agent_name")
