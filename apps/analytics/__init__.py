# apps/analytics/__init__.py
