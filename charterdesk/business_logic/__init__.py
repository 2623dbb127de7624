# charterdesk/business_logic/__init__.py
# Managers are imported by module path, e.g.
# from charterdesk.business_logic.booking_manager import BookingManager
