# apps/core/__init__.py

"""
Core - users, projects, tasks and notifications

Contains:
- Domain enumerations and records (domain.py)
- Table-driven access policy (policy.py) and its Django bridge (permissions.py)
- ORM models and JSON API views
- Seed command for development
"""
