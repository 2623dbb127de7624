# charterdesk/presentation/opportunities_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QLabel, QTableView, QPushButton,
                             QHBoxLayout, QMessageBox, QDialog, QLineEdit, QComboBox,
                             QFormLayout, QDialogButtonBox, QAbstractItemView, QTextEdit,
                             QHeaderView, QGroupBox, QListWidget)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex
from PyQt5.QtGui import QColor

from typing import List, Optional, Any, Dict

from charterdesk.business_logic.entities.opportunity_entity import OpportunityEntity
from charterdesk.business_logic.opportunity_manager import (
    OpportunityManager, OpportunityConversionError, MONEY_FIELDS, PERCENT_FIELDS
)
from charterdesk.business_logic.client_manager import ClientManager
from charterdesk.business_logic.agent_manager import AgentManager
from charterdesk.business_logic.yacht_manager import YachtManager
from charterdesk.business_logic.calculations.derived_fields import derive_opportunity_fields
from charterdesk.business_logic.permissions import PermissionDeniedError
from charterdesk.config import DEFAULT_VAT_PERCENTAGE, DEFAULT_PROBABILITY_PERCENTAGE
from charterdesk.constants import OpportunityStage, OpportunityType, LeadSource, PaymentMethod
from charterdesk.presentation.custom_widgets import AmountLineEdit, DerivedValueLabel, DateEdit, format_amount
from charterdesk.utils.date_converter import to_display_str
import logging

logger = logging.getLogger(__name__)

FIELD_LABELS = {
    "base_price": "Base price:",
    "vip_cost": "VIP cost:",
    "alcohol_cost": "Alcohol cost:",
    "catering_cost": "Catering cost:",
    "extra_hour_cost": "Extra hour cost:",
    "addons_total": "Add-ons total:",
    "advance_paid": "Advance paid:",
    "agent_discount_percentage": "Agent discount %:",
    "client_discount_percentage": "Client discount %:",
    "vat_percentage": "VAT %:",
    "probability_percentage": "Probability %:",
}

DERIVED_LABELS = (
    ("total_before_discount", "Total before discount:"),
    ("agent_discount_amount", "Agent discount:"),
    ("client_discount_amount", "Client discount:"),
    ("subtotal", "Subtotal:"),
    ("vat_amount", "VAT:"),
    ("total_amount", "Total:"),
    ("balance_amount", "Balance:"),
    ("expected_revenue", "Expected revenue:"),
)


# --- Table model ---
class OpportunityTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[OpportunityEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[OpportunityEntity] = data if data is not None else []
        self._client_names: Dict[int, str] = {}
        self._headers = ["Code", "Client", "Type", "Stage", "Charter date", "Total", "Balance", "Probability", "Expected"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._data)):
            return QVariant()
        opp = self._data[index.row()]
        col = index.column()

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return opp.opportunity_code
            if col == 1: return self._client_names.get(opp.client_id, "Unknown") if opp.client_id else "-"
            if col == 2: return opp.opportunity_type.value
            if col == 3: return opp.stage.value
            if col == 4: return to_display_str(opp.date_of_charter)
            if col == 5: return format_amount(opp.total_amount)
            if col == 6: return format_amount(opp.balance_amount)
            if col == 7: return f"{opp.probability_percentage}%"
            if col == 8: return format_amount(opp.expected_revenue)
        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if col >= 5:
                return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
            return Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter
        elif role == Qt.ItemDataRole.ForegroundRole:
            if opp.stage == OpportunityStage.WON:
                return QColor("darkGreen")
            if opp.stage == OpportunityStage.LOST:
                return QColor(Qt.GlobalColor.gray)
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[OpportunityEntity], client_names: Dict[int, str]):
        self.beginResetModel()
        self._data = new_data
        self._client_names = client_names
        self.endResetModel()

    def get_opportunity_at_row(self, row: int) -> Optional[OpportunityEntity]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None


# --- Add/Edit dialog ---
class OpportunityDialog(QDialog):
    def __init__(self,
                 opportunity_manager: OpportunityManager,
                 client_manager: ClientManager,
                 agent_manager: AgentManager,
                 yacht_manager: YachtManager,
                 opportunity: Optional[OpportunityEntity] = None,
                 parent=None):
        super().__init__(parent)
        self.opportunity_manager = opportunity_manager
        self.client_manager = client_manager
        self.agent_manager = agent_manager
        self.yacht_manager = yacht_manager
        self.opportunity = opportunity
        is_edit_mode = opportunity is not None

        self.setWindowTitle(f"Edit opportunity {opportunity.opportunity_code}" if is_edit_mode else "New opportunity")
        self.setMinimumWidth(520)

        layout = QVBoxLayout(self)
        form = QFormLayout()

        self.type_combo = QComboBox(self)
        for opp_type in OpportunityType:
            self.type_combo.addItem(opp_type.value.capitalize(), opp_type)
        self.stage_combo = QComboBox(self)
        for stage in OpportunityStage:
            self.stage_combo.addItem(stage.value.capitalize(), stage)
        self.lead_source_combo = QComboBox(self)
        self.lead_source_combo.addItem("-", None)
        for source in LeadSource:
            self.lead_source_combo.addItem(source.value.capitalize(), source)
        self.payment_method_combo = QComboBox(self)
        self.payment_method_combo.addItem("-", None)
        for method in PaymentMethod:
            self.payment_method_combo.addItem(method.value.replace("_", " ").capitalize(), method)

        self.client_combo = QComboBox(self)
        self.client_combo.addItem("-", None)
        for client in self.client_manager.get_all_clients():
            self.client_combo.addItem(client.client_name, client.id)
        self.agent_combo = QComboBox(self)
        self.agent_combo.addItem("-", None)
        for agent in self.agent_manager.get_all_agents(active_only=True):
            self.agent_combo.addItem(agent.agent_name, agent.id)
        self.yacht_combo = QComboBox(self)
        self.yacht_combo.addItem("-", None)
        for yacht in self.yacht_manager.get_all_yachts(active_only=True):
            self.yacht_combo.addItem(yacht.name, yacht.id)

        self.charter_date_edit = DateEdit(parent=self)
        self.duration_edit = AmountLineEdit(placeholder="hours", parent=self)
        self.adults_edit = QLineEdit(self)
        self.kids_edit = QLineEdit(self)

        self.value_edits: Dict[str, AmountLineEdit] = {}
        for name in MONEY_FIELDS + PERCENT_FIELDS:
            self.value_edits[name] = AmountLineEdit(parent=self)

        self.lost_reason_edit = QLineEdit(self)
        self.notes_edit = QTextEdit(self)
        self.notes_edit.setFixedHeight(60)

        form.addRow("Type:", self.type_combo)
        form.addRow("Stage:", self.stage_combo)
        form.addRow("Lead source:", self.lead_source_combo)
        form.addRow("Client:", self.client_combo)
        form.addRow("Agent:", self.agent_combo)
        form.addRow("Yacht:", self.yacht_combo)
        form.addRow("Charter date:", self.charter_date_edit)
        form.addRow("Duration (hours):", self.duration_edit)
        form.addRow("Adults:", self.adults_edit)
        form.addRow("Kids:", self.kids_edit)
        for name in MONEY_FIELDS + PERCENT_FIELDS:
            form.addRow(FIELD_LABELS[name], self.value_edits[name])
        form.addRow("Payment method:", self.payment_method_combo)
        form.addRow("Lost reason:", self.lost_reason_edit)
        form.addRow("Notes:", self.notes_edit)
        layout.addLayout(form)

        derived_box = QGroupBox("Quote", self)
        derived_form = QFormLayout(derived_box)
        self.derived_labels: Dict[str, DerivedValueLabel] = {}
        for key, label in DERIVED_LABELS:
            self.derived_labels[key] = DerivedValueLabel(self)
            derived_form.addRow(label, self.derived_labels[key])
        layout.addWidget(derived_box)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)
        layout.addWidget(self.button_box)

        self._populate()

        for edit in self.value_edits.values():
            edit.textChanged.connect(self._recalculate)
        self.agent_combo.currentIndexChanged.connect(self._on_party_changed)
        self.client_combo.currentIndexChanged.connect(self._on_party_changed)
        self._recalculate()

    def _select(self, combo: QComboBox, value: Any):
        index = combo.findData(value)
        if index >= 0:
            combo.setCurrentIndex(index)

    def _populate(self):
        opp = self.opportunity
        if opp is None:
            self.value_edits["vat_percentage"].set_value(DEFAULT_VAT_PERCENTAGE)
            self.value_edits["probability_percentage"].set_value(DEFAULT_PROBABILITY_PERCENTAGE)
            return
        self._select(self.type_combo, opp.opportunity_type)
        self._select(self.stage_combo, opp.stage)
        self._select(self.lead_source_combo, opp.lead_source)
        self._select(self.client_combo, opp.client_id)
        self._select(self.agent_combo, opp.agent_id)
        self._select(self.yacht_combo, opp.yacht_id)
        self._select(self.payment_method_combo, opp.payment_method)
        self.charter_date_edit.setDate(opp.date_of_charter)
        self.duration_edit.set_value(opp.duration_hours)
        self.adults_edit.setText(str(opp.adults))
        self.kids_edit.setText(str(opp.kids))
        for name, edit in self.value_edits.items():
            edit.set_value(getattr(opp, name))
        self.lost_reason_edit.setText(opp.lost_reason or "")
        self.notes_edit.setPlainText(opp.notes or "")

    def _raw_values(self) -> Dict[str, Any]:
        return {name: edit.raw_value() for name, edit in self.value_edits.items()}

    def _on_party_changed(self):
        raw = self._raw_values()
        raw["agent_id"] = self.agent_combo.currentData()
        raw["client_id"] = self.client_combo.currentData()
        filled = self.opportunity_manager.apply_party_defaults(raw)
        for name in ("agent_discount_percentage", "client_discount_percentage"):
            if filled.get(name) != raw.get(name):
                self.value_edits[name].set_value(filled[name])

    def _recalculate(self):
        derived = derive_opportunity_fields(self._raw_values())
        for key, label in self.derived_labels.items():
            label.set_amount(derived[key])

    def get_data(self) -> Optional[Dict[str, Any]]:
        stage = self.stage_combo.currentData()
        if stage == OpportunityStage.LOST and not self.lost_reason_edit.text().strip():
            QMessageBox.warning(self, "Invalid input", "Please give a reason for a lost opportunity.")
            return None
        data = self._raw_values()
        data.update({
            "stage": stage,
            "opportunity_type": self.type_combo.currentData(),
            "lead_source": self.lead_source_combo.currentData(),
            "client_id": self.client_combo.currentData(),
            "agent_id": self.agent_combo.currentData(),
            "yacht_id": self.yacht_combo.currentData(),
            "date_of_charter": self.charter_date_edit.date(),
            "duration_hours": self.duration_edit.raw_value(),
            "adults": self.adults_edit.text(),
            "kids": self.kids_edit.text(),
            "payment_method": self.payment_method_combo.currentData(),
            "lost_reason": self.lost_reason_edit.text().strip() or None,
            "notes": self.notes_edit.toPlainText().strip() or None,
        })
        return data


# --- Main widget ---
class OpportunitiesUI(QWidget):
    def __init__(self,
                 opportunity_manager: OpportunityManager,
                 client_manager: ClientManager,
                 agent_manager: AgentManager,
                 yacht_manager: YachtManager,
                 user_role: Any = None,
                 parent=None):
        super().__init__(parent)
        self.opportunity_manager = opportunity_manager
        self.client_manager = client_manager
        self.agent_manager = agent_manager
        self.yacht_manager = yacht_manager
        self.user_role = user_role
        self.table_model = OpportunityTableModel()
        self._init_ui()
        self.load_opportunities_data()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

        filter_layout = QHBoxLayout()
        self.stage_filter_combo = QComboBox(self)
        self.stage_filter_combo.addItem("All stages", None)
        for stage in OpportunityStage:
            self.stage_filter_combo.addItem(stage.value.capitalize(), stage)
        self.stage_filter_combo.currentIndexChanged.connect(self.load_opportunities_data)
        filter_layout.addWidget(QLabel("Stage:"))
        filter_layout.addWidget(self.stage_filter_combo)
        filter_layout.addStretch()
        self.summary_label = QLabel(self)
        filter_layout.addWidget(self.summary_label)
        main_layout.addLayout(filter_layout)

        self.table_view = QTableView()
        self.table_view.setModel(self.table_model)
        self.table_view.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table_view.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        header = self.table_view.horizontalHeader()
        if header:
            header.setSectionResizeMode(QHeaderView.ResizeMode.ResizeToContents)
            header.setSectionResizeMode(1, QHeaderView.ResizeMode.Stretch)
        main_layout.addWidget(self.table_view)

        button_layout = QHBoxLayout()
        self.add_button = QPushButton("New opportunity")
        self.edit_button = QPushButton("Edit")
        self.delete_button = QPushButton("Delete")
        self.convert_button = QPushButton("Convert to booking")
        self.logs_button = QPushButton("Activity log")
        self.refresh_button = QPushButton("Refresh")

        self.add_button.clicked.connect(self._open_add_dialog)
        self.edit_button.clicked.connect(self._open_edit_dialog)
        self.delete_button.clicked.connect(self._delete_selected)
        self.convert_button.clicked.connect(self._convert_selected)
        self.logs_button.clicked.connect(self._show_logs)
        self.refresh_button.clicked.connect(self.load_opportunities_data)

        for button in (self.add_button, self.edit_button, self.delete_button, self.convert_button, self.logs_button):
            button_layout.addWidget(button)
        button_layout.addStretch()
        button_layout.addWidget(self.refresh_button)
        main_layout.addLayout(button_layout)
        logger.info("OpportunitiesUI initialized.")

    def load_opportunities_data(self):
        try:
            opportunities = self.opportunity_manager.get_opportunities(self.stage_filter_combo.currentData())
            client_names = {c.id: c.client_name for c in self.client_manager.get_all_clients()}
            self.table_model.update_data(opportunities, client_names)
            summary = self.opportunity_manager.get_pipeline_summary()
            self.summary_label.setText(
                f"Open: {summary['open_count']}  Pipeline: {format_amount(summary['pipeline_value'])}  "
                f"Expected: {format_amount(summary['expected_revenue'])}  "
                f"Won: {summary['won_count']}  Lost: {summary['lost_count']}"
            )
            logger.debug(f"{len(opportunities)} opportunities loaded into table.")
        except Exception as e:
            logger.error(f"Error loading opportunities: {e}", exc_info=True)
            QMessageBox.critical(self, "Load error", f"Could not load opportunities: {e}")

    def _selected(self) -> Optional[OpportunityEntity]:
        opp = self.table_model.get_opportunity_at_row(self.table_view.currentIndex().row())
        if not opp:
            QMessageBox.information(self, "No selection", "Please select an opportunity first.")
        return opp

    def _dialog(self, opportunity: Optional[OpportunityEntity] = None) -> OpportunityDialog:
        return OpportunityDialog(self.opportunity_manager, self.client_manager, self.agent_manager,
                                 self.yacht_manager, opportunity, parent=self)

    def _open_add_dialog(self):
        dialog = self._dialog()
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                try:
                    created = self.opportunity_manager.create_opportunity(**data)
                    QMessageBox.information(self, "Saved", f"Opportunity {created.opportunity_code} created.")
                    self.load_opportunities_data()
                except ValueError as ve:
                    QMessageBox.warning(self, "Validation error", str(ve))
                except Exception as e:
                    logger.error(f"Error creating opportunity: {e}", exc_info=True)
                    QMessageBox.critical(self, "Error", f"Could not create the opportunity: {e}")

    def _open_edit_dialog(self):
        opp = self._selected()
        if not opp:
            return
        dialog = self._dialog(opp)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                try:
                    self.opportunity_manager.update_opportunity(opp.id, role=self.user_role, **data)
                    self.load_opportunities_data()
                except (ValueError, PermissionDeniedError) as ve:
                    QMessageBox.warning(self, "Not saved", str(ve))
                except Exception as e:
                    logger.error(f"Error updating opportunity ID {opp.id}: {e}", exc_info=True)
                    QMessageBox.critical(self, "Error", f"Could not update the opportunity: {e}")

    def _delete_selected(self):
        opp = self._selected()
        if not opp:
            return
        reply = QMessageBox.question(self, "Confirm delete", f"Delete opportunity {opp.opportunity_code}?",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply == QMessageBox.StandardButton.Yes:
            try:
                self.opportunity_manager.delete_opportunity(opp.id)
                self.load_opportunities_data()
            except ValueError as ve:
                QMessageBox.warning(self, "Not deleted", str(ve))
            except Exception as e:
                logger.error(f"Error deleting opportunity ID {opp.id}: {e}", exc_info=True)
                QMessageBox.critical(self, "Error", f"Could not delete the opportunity: {e}")

    def _convert_selected(self):
        opp = self._selected()
        if not opp:
            return
        reply = QMessageBox.question(self, "Convert to booking",
                                     f"Create a confirmed booking from {opp.opportunity_code} "
                                     f"({format_amount(opp.total_amount)})?",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply != QMessageBox.StandardButton.Yes:
            return
        try:
            booking = self.opportunity_manager.convert_to_booking(opp.id)
            QMessageBox.information(self, "Converted", f"Booking {booking.ticket_number} created.")
        except OpportunityConversionError as ce:
            QMessageBox.critical(self, "Conversion incomplete",
                                 f"{ce}\n\nCompleted: {', '.join(ce.completed_steps)}\nFailed at: {ce.failed_step}")
        except ValueError as ve:
            QMessageBox.warning(self, "Not converted", str(ve))
        except Exception as e:
            logger.error(f"Error converting opportunity ID {opp.id}: {e}", exc_info=True)
            QMessageBox.critical(self, "Error", f"Could not convert the opportunity: {e}")
        self.load_opportunities_data()

    def _show_logs(self):
        opp = self._selected()
        if not opp:
            return
        dialog = QDialog(self)
        dialog.setWindowTitle(f"Activity - {opp.opportunity_code}")
        dialog.setMinimumWidth(480)
        layout = QVBoxLayout(dialog)
        log_list = QListWidget(dialog)
        for log in self.opportunity_manager.get_logs(opp.id):
            log_list.addItem(f"{log.created_at:%Y-%m-%d %H:%M}  [{log.message_type.value}]  {log.message_content}")
        layout.addWidget(log_list)

        note_layout = QHBoxLayout()
        note_edit = QLineEdit(dialog)
        add_note_button = QPushButton("Add note", dialog)
        note_layout.addWidget(note_edit)
        note_layout.addWidget(add_note_button)
        layout.addLayout(note_layout)

        def add_note():
            try:
                log = self.opportunity_manager.add_note(opp.id, note_edit.text())
                log_list.addItem(f"{log.created_at:%Y-%m-%d %H:%M}  [{log.message_type.value}]  {log.message_content}")
                note_edit.clear()
            except ValueError as ve:
                QMessageBox.warning(dialog, "Not saved", str(ve))

        add_note_button.clicked.connect(add_note)
        dialog.exec_()
