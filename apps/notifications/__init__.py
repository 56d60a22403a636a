# apps/notifications/__init__.py
