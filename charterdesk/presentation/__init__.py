# charterdesk/presentation/__init__.py
