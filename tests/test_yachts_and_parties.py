# tests/test_yachts_and_parties.py

from decimal import Decimal

import pytest

from charterdesk.business_logic.permissions import UserRole, PermissionDeniedError
from charterdesk.constants import GuestCategory


def test_yacht_pricing_needs_manage_yachts(yacht_manager):
    with pytest.raises(PermissionDeniedError):
        yacht_manager.add_yacht("Pearl", shared_packages={"adult": "120"}, role=UserRole.MANAGER)

    yacht = yacht_manager.add_yacht("Pearl", capacity="25", role=UserRole.SALES)
    assert yacht.capacity == 25
    assert yacht.shared_packages == {}

    with pytest.raises(PermissionDeniedError):
        yacht_manager.update_yacht(yacht.id, role=UserRole.SALES, private_hourly_rate="800")
    renamed = yacht_manager.update_yacht(yacht.id, role=UserRole.SALES, name="Black Pearl")
    assert renamed.name == "Black Pearl"


def test_yacht_packages_are_normalized(yacht_manager):
    yacht = yacht_manager.add_yacht(
        "Marlin",
        shared_packages={GuestCategory.ADULT: "150", "child": "75.5", "mermaid": "10"},
        role=UserRole.SUPER_ADMIN
    )
    assert yacht.shared_packages == {"adult": Decimal("150.00"), "child": Decimal("75.50")}
    assert yacht_manager.get_unit_prices(yacht.id) == {"adult": Decimal("150"), "child": Decimal("75.5")}
    assert yacht_manager.get_unit_prices(None) == {}
    assert yacht_manager.get_unit_prices(9999) == {}


def test_duplicate_yacht_names_are_rejected(yacht_manager, priced_yacht):
    with pytest.raises(ValueError):
        yacht_manager.add_yacht(priced_yacht.name)
    with pytest.raises(ValueError):
        yacht_manager.add_yacht("   ")


def test_inactive_yachts_are_hidden_from_active_list(yacht_manager, priced_yacht):
    yacht_manager.update_yacht(priced_yacht.id, is_active=False)
    assert yacht_manager.get_all_yachts(active_only=True) == []
    assert len(yacht_manager.get_all_yachts()) == 1


def test_agent_permissions_are_enforced(agent_manager):
    with pytest.raises(PermissionDeniedError):
        agent_manager.add_agent("Nope", role=UserRole.SALES)

    agent = agent_manager.add_agent("Gulf Agents", role=UserRole.MANAGER, commission_percentage="12.5")
    assert agent.commission_percentage == Decimal("12.5")

    updated = agent_manager.update_agent(agent.id, UserRole.MANAGER, is_active=False)
    assert updated.is_active is False
    assert agent_manager.get_all_agents(active_only=True) == []

    with pytest.raises(PermissionDeniedError):
        agent_manager.delete_agent(agent.id, UserRole.MANAGER)
    assert agent_manager.delete_agent(agent.id, UserRole.ADMIN) is True


def test_clients(client_manager):
    client_manager.add_client("Fatima Al Mansoori", discount_percentage="5")
    client_manager.add_client("John Smith")

    assert [c.client_name for c in client_manager.search_clients("mans")] == ["Fatima Al Mansoori"]
    assert len(client_manager.search_clients("")) == 2

    john = client_manager.search_clients("John")[0]
    updated = client_manager.update_client(john.id, discount_percentage="abc")
    assert updated.discount_percentage == Decimal("0")

    with pytest.raises(ValueError):
        client_manager.update_client(john.id, client_name="")
    assert client_manager.delete_client(john.id) is True
    with pytest.raises(ValueError):
        client_manager.delete_client(john.id)
