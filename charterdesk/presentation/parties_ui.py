# charterdesk/presentation/parties_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QTableView, QPushButton, QTabWidget,
                             QHBoxLayout, QMessageBox, QDialog, QLineEdit,
                             QFormLayout, QDialogButtonBox, QAbstractItemView, QHeaderView)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex

from typing import List, Optional, Any, Dict

from charterdesk.business_logic.client_manager import ClientManager
from charterdesk.business_logic.agent_manager import AgentManager
from charterdesk.business_logic.permissions import Permission, PermissionDeniedError, has_permission
from charterdesk.presentation.custom_widgets import AmountLineEdit
import logging

logger = logging.getLogger(__name__)


class PartyTableModel(QAbstractTableModel):
    """Clients and agents share one layout; only the name and percentage attributes differ."""

    def __init__(self, name_attr: str, percent_attr: str, percent_header: str, parent=None):
        super().__init__(parent)
        self._data: List[Any] = []
        self._name_attr = name_attr
        self._percent_attr = percent_attr
        self._headers = ["ID", "Name", "Phone", "Email", percent_header]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._data)):
            return QVariant()
        party = self._data[index.row()]
        col = index.column()
        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return str(party.id)
            if col == 1: return getattr(party, self._name_attr)
            if col == 2: return party.phone or ""
            if col == 3: return party.email or ""
            if col == 4: return f"{getattr(party, self._percent_attr)} %"
        elif role == Qt.ItemDataRole.TextAlignmentRole and col == 4:
            return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[Any]):
        self.beginResetModel()
        self._data = new_data
        self.endResetModel()

    def get_party_at_row(self, row: int) -> Optional[Any]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None


class PartyDialog(QDialog):
    def __init__(self, title: str, percent_label: str, values: Optional[Dict[str, Any]] = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setMinimumWidth(360)
        values = values or {}

        layout = QFormLayout(self)
        self.name_edit = QLineEdit(values.get("name") or "", self)
        self.phone_edit = QLineEdit(values.get("phone") or "", self)
        self.email_edit = QLineEdit(values.get("email") or "", self)
        self.percent_edit = AmountLineEdit(values.get("percent"), placeholder="0", parent=self)
        layout.addRow("Name:", self.name_edit)
        layout.addRow("Phone:", self.phone_edit)
        layout.addRow("Email:", self.email_edit)
        layout.addRow(percent_label, self.percent_edit)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)
        layout.addRow(self.button_box)

    def get_data(self) -> Optional[Dict[str, Any]]:
        if not self.name_edit.text().strip():
            QMessageBox.warning(self, "Invalid input", "Name cannot be empty.")
            return None
        return {
            "name": self.name_edit.text().strip(),
            "phone": self.phone_edit.text().strip() or None,
            "email": self.email_edit.text().strip() or None,
            "percent": self.percent_edit.raw_value(),
        }


class _PartyListWidget(QWidget):
    title = ""
    percent_label = ""

    def __init__(self, table_model: PartyTableModel, parent=None):
        super().__init__(parent)
        self.table_model = table_model
        layout = QVBoxLayout(self)

        self.table_view = QTableView(self)
        self.table_view.setModel(self.table_model)
        self.table_view.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table_view.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        header = self.table_view.horizontalHeader()
        if header:
            header.setSectionResizeMode(QHeaderView.ResizeMode.ResizeToContents)
            header.setSectionResizeMode(1, QHeaderView.ResizeMode.Stretch)
        layout.addWidget(self.table_view)

        button_layout = QHBoxLayout()
        self.add_button = QPushButton(f"Add {self.title}")
        self.edit_button = QPushButton("Edit")
        self.delete_button = QPushButton("Delete")
        self.add_button.clicked.connect(self._open_add_dialog)
        self.edit_button.clicked.connect(self._open_edit_dialog)
        self.delete_button.clicked.connect(self._delete_selected)
        button_layout.addWidget(self.add_button)
        button_layout.addWidget(self.edit_button)
        button_layout.addWidget(self.delete_button)
        button_layout.addStretch()
        layout.addLayout(button_layout)

    def load_data(self):
        try:
            self.table_model.update_data(self._fetch())
        except Exception as e:
            logger.error(f"Error loading {self.title}s: {e}", exc_info=True)
            QMessageBox.critical(self, "Load error", f"Could not load {self.title}s: {e}")

    def _run(self, action, *args, **kwargs):
        try:
            action(*args, **kwargs)
            self.load_data()
        except (ValueError, PermissionDeniedError) as ve:
            QMessageBox.warning(self, "Not saved", str(ve))
        except Exception as e:
            logger.error(f"Error saving {self.title}: {e}", exc_info=True)
            QMessageBox.critical(self, "Error", f"Could not save the {self.title}: {e}")

    def _open_add_dialog(self):
        dialog = PartyDialog(f"New {self.title}", self.percent_label, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                self._run(self._add, data)

    def _open_edit_dialog(self):
        party = self.table_model.get_party_at_row(self.table_view.currentIndex().row())
        if not party:
            QMessageBox.information(self, "No selection", f"Please select a {self.title} first.")
            return
        dialog = PartyDialog(f"Edit {self.title}", self.percent_label, self._values(party), parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                self._run(self._update, party.id, data)

    def _delete_selected(self):
        party = self.table_model.get_party_at_row(self.table_view.currentIndex().row())
        if not party:
            QMessageBox.information(self, "No selection", f"Please select a {self.title} first.")
            return
        reply = QMessageBox.question(self, "Confirm delete", f"Delete this {self.title}?",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply == QMessageBox.StandardButton.Yes:
            self._run(self._delete, party.id)


class ClientsWidget(_PartyListWidget):
    title = "client"
    percent_label = "Discount %:"

    def __init__(self, client_manager: ClientManager, parent=None):
        self.client_manager = client_manager
        super().__init__(PartyTableModel("client_name", "discount_percentage", "Discount"), parent)
        self.load_data()

    def _fetch(self):
        return self.client_manager.get_all_clients()

    def _values(self, client) -> Dict[str, Any]:
        return {"name": client.client_name, "phone": client.phone, "email": client.email,
                "percent": client.discount_percentage}

    def _add(self, data):
        self.client_manager.add_client(data["name"], data["phone"], data["email"], data["percent"])

    def _update(self, client_id, data):
        self.client_manager.update_client(client_id, client_name=data["name"], phone=data["phone"],
                                          email=data["email"], discount_percentage=data["percent"])

    def _delete(self, client_id):
        self.client_manager.delete_client(client_id)


class AgentsWidget(_PartyListWidget):
    title = "agent"
    percent_label = "Commission %:"

    def __init__(self, agent_manager: AgentManager, user_role: Any = None, parent=None):
        self.agent_manager = agent_manager
        self.user_role = user_role
        super().__init__(PartyTableModel("agent_name", "commission_percentage", "Commission"), parent)
        self.add_button.setEnabled(has_permission(user_role, Permission.CREATE_AGENT))
        self.edit_button.setEnabled(has_permission(user_role, Permission.EDIT_AGENT))
        self.delete_button.setEnabled(has_permission(user_role, Permission.DELETE_AGENT))
        self.load_data()

    def _fetch(self):
        return self.agent_manager.get_all_agents()

    def _values(self, agent) -> Dict[str, Any]:
        return {"name": agent.agent_name, "phone": agent.phone, "email": agent.email,
                "percent": agent.commission_percentage}

    def _add(self, data):
        self.agent_manager.add_agent(data["name"], self.user_role, data["phone"], data["email"], data["percent"])

    def _update(self, agent_id, data):
        self.agent_manager.update_agent(agent_id, self.user_role, agent_name=data["name"], phone=data["phone"],
                                        email=data["email"], commission_percentage=data["percent"])

    def _delete(self, agent_id):
        self.agent_manager.delete_agent(agent_id, self.user_role)


class PartiesUI(QWidget):
    def __init__(self, client_manager: ClientManager, agent_manager: AgentManager,
                 user_role: Any = None, parent=None):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        self.tabs = QTabWidget()
        layout.addWidget(self.tabs)
        self.clients_widget = ClientsWidget(client_manager)
        self.agents_widget = AgentsWidget(agent_manager, user_role)
        self.tabs.addTab(self.clients_widget, "Clients")
        self.tabs.addTab(self.agents_widget, "Agents")
        logger.info("PartiesUI initialized.")
