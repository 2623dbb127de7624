# charterdesk/constants.py

from enum import Enum

# General
DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

class OpportunityStage(Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUOTED = "quoted"
    NEGOTIATION = "negotiation"
    FOLLOWUP = "followup"
    WON = "won"
    LOST = "lost"

CLOSED_OPPORTUNITY_STAGES = (OpportunityStage.WON, OpportunityStage.LOST)

class OpportunityType(Enum):
    PRIVATE = "private"
    SHARED = "shared"
    VIP = "vip"
    SUNSET = "sunset"
    EVENT = "event"

class LeadSource(Enum):
    WEBSITE = "website"
    WHATSAPP = "whatsapp"
    AGENT = "agent"
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    REFERRAL = "referral"
    REPEAT = "repeat"
    OTHER = "other"

class OpportunityLogType(Enum):
    NOTE = "note"
    STAGE_CHANGE = "stage_change"

class PaymentMethod(Enum):
    CASH = "cash"
    CARD = "card"
    CREDIT = "credit"
    BANK_TRANSFER = "bank_transfer"
    CHEQUES = "cheques"
    ONLINE = "online"
    NO_MODE = "nomode"
    OTHER = "other"

class CruiseType(Enum):
    SHARED = "shared"
    PRIVATE = "private"

class BookingStatus(Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class PaymentStatus(Enum):
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"

class PayrollStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    HOLD = "hold"

class EmployeeStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

class InvoiceStatus(Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    PARTIAL = "partial"
    CANCELLED = "cancelled"

class LedgerEntryType(Enum):
    INCOME = "income"
    EXPENSE = "expense"

class SourceModule(Enum):
    CRM = "crm"
    POS = "pos"
    HRMS = "hrms"
    INVENTORY = "inventory"
    MANUAL = "manual"

class GuestCategory(Enum):
    """Per-seat price categories of a shared cruise, in display order."""
    ADULT = "adult"
    CHILD = "child"
    ALCOHOL_ADULT = "alcohol_adult"
    TOP_DECK_CHILD = "top_deck_child"
    TOP_DECK_ADULT = "top_deck_adult"
    TOP_DECK_ADULT_ALCOHOL = "top_deck_adult_alcohol"
    CHILD_VIP = "child_vip"
    ADULT_VIP = "adult_vip"
    ADULT_ALCOHOL_VIP = "adult_alcohol_vip"
    ROYAL_CHILD = "royal_child"
    ROYAL_ADULT = "royal_adult"
    ROYAL_ADULT_ALCOHOL = "royal_adult_alcohol"

GUEST_CATEGORY_LABELS = {
    GuestCategory.ADULT: "Adult",
    GuestCategory.CHILD: "Child",
    GuestCategory.ALCOHOL_ADULT: "Adult (Alcohol)",
    GuestCategory.TOP_DECK_CHILD: "Top Deck Child",
    GuestCategory.TOP_DECK_ADULT: "Top Deck Adult",
    GuestCategory.TOP_DECK_ADULT_ALCOHOL: "Top Deck Adult (Alcohol)",
    GuestCategory.CHILD_VIP: "VIP Child",
    GuestCategory.ADULT_VIP: "VIP Adult",
    GuestCategory.ADULT_ALCOHOL_VIP: "VIP Adult (Alcohol)",
    GuestCategory.ROYAL_CHILD: "Royal Child",
    GuestCategory.ROYAL_ADULT: "Royal Adult",
    GuestCategory.ROYAL_ADULT_ALCOHOL: "Royal Adult (Alcohol)",
}

MONTHS = ["January", "February", "March", "April", "May", "June", "July",
          "August", "September", "October", "November", "December"]
