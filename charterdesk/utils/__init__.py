# charterdesk/utils/__init__.py
