# apps/__init__.py

"""
Teamflow Tracker - Django applications

This package contains all the applications of the system:
- core: models, access policy and the users/projects/tasks API
- notifications: notification API and WebSocket delivery
- analytics: dashboard and project progress statistics
"""

__version__ = '0.1.0'
