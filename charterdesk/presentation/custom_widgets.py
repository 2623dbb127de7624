# charterdesk/presentation/custom_widgets.py

from PyQt5.QtWidgets import (QWidget, QLineEdit, QPushButton, QHBoxLayout, QCalendarWidget,
                             QDialog, QVBoxLayout, QLabel)
from PyQt5.QtCore import Qt, pyqtSignal
from datetime import date
from decimal import Decimal
from typing import Optional, Any
import logging

from charterdesk.business_logic.calculations.money import Money, to_decimal
from charterdesk.config import DEFAULT_CURRENCY
from charterdesk.utils.date_converter import to_display_str, from_qdate, to_qdate

logger = logging.getLogger(__name__)


def format_amount(value: Any) -> str:
    return f"{DEFAULT_CURRENCY} {Money.of(value).as_decimal():,.2f}"


class AmountLineEdit(QLineEdit):
    """
    Free-text numeric input. Whatever is typed is kept as typed; parsing happens
    in the calculation layer, where junk reads as 0.
    """

    def __init__(self, initial: Any = None, placeholder: str = "0.00", parent=None):
        super().__init__(parent)
        self.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        self.setPlaceholderText(placeholder)
        if initial is not None:
            self.set_value(initial)

    def set_value(self, value: Any):
        self.setText("" if value is None else str(value))

    def raw_value(self) -> str:
        return self.text()

    def decimal_value(self) -> Decimal:
        return to_decimal(self.text())


class DerivedValueLabel(QLabel):
    """Read-only label for a computed amount."""

    def __init__(self, parent=None):
        super().__init__(format_amount(0), parent)
        self.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        self.setStyleSheet("font-weight: bold;")

    def set_amount(self, value: Any, highlight_negative: bool = True):
        self.setText(format_amount(value))
        if highlight_negative and Money.of(value).is_negative():
            self.setStyleSheet("font-weight: bold; color: #B91C1C;")
        else:
            self.setStyleSheet("font-weight: bold;")


class CalendarDialog(QDialog):
    """Shows a calendar and emits the picked date."""
    dateSelected = pyqtSignal(date)

    def __init__(self, initial_date: Optional[date] = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Select date")
        self.setModal(True)
        layout = QVBoxLayout(self)

        self.calendar = QCalendarWidget(self)
        self.calendar.setGridVisible(True)
        self.calendar.setSelectedDate(to_qdate(initial_date))
        self.calendar.activated.connect(self._day_chosen)
        self.calendar.clicked.connect(self._day_chosen)
        layout.addWidget(self.calendar)

    def _day_chosen(self, q_date):
        self.dateSelected.emit(from_qdate(q_date))
        self.accept()


class DateEdit(QWidget):
    """A date field that may also be left empty."""
    dateChanged = pyqtSignal(object)

    def __init__(self, initial_date: Optional[date] = None, allow_empty: bool = True, parent=None):
        super().__init__(parent)
        self._date: Optional[date] = None
        self._allow_empty = allow_empty

        self.main_layout = QHBoxLayout(self)
        self.main_layout.setContentsMargins(0, 0, 0, 0)

        self.line_edit = QLineEdit(self)
        self.line_edit.setReadOnly(True)
        self.line_edit.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self.calendar_button = QPushButton("📅", self)
        self.calendar_button.setFixedWidth(40)
        self.clear_button = QPushButton("✕", self)
        self.clear_button.setFixedWidth(30)
        self.clear_button.setVisible(allow_empty)

        self.main_layout.addWidget(self.line_edit)
        self.main_layout.addWidget(self.calendar_button)
        self.main_layout.addWidget(self.clear_button)

        self.calendar_button.clicked.connect(self.open_calendar)
        self.clear_button.clicked.connect(lambda: self.setDate(None))

        self.setDate(initial_date if initial_date or allow_empty else date.today())

    def open_calendar(self):
        dialog = CalendarDialog(initial_date=self._date, parent=self)
        dialog.dateSelected.connect(self.setDate)
        dialog.exec_()

    def setDate(self, value: Optional[date]):
        if value is None and not self._allow_empty:
            return
        if value is not None and not isinstance(value, date):
            logger.warning(f"Ignoring non-date value {value!r} for DateEdit.")
            return
        self._date = value
        self.line_edit.setText(to_display_str(value) if value else "")
        self.dateChanged.emit(value)

    def date(self) -> Optional[date]:
        return self._date

    def toPyDate(self) -> Optional[date]:
        """Same accessor name as QDate."""
        return self.date()
