# config/settings/test.py

from .base import *

# === TESTS ===

DEBUG = False

SECRET_KEY = 'test-secret-key'

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'teamflow-test-cache',
    }
}

SESSION_ENGINE = 'django.contrib.sessions.backends.db'

CHANNEL_LAYERS = {
    'default': {
        'BACKEND': 'channels.layers.InMemoryChannelLayer'
    }
}

STORAGES['staticfiles'] = {
    'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
}

# Fast hashing for created users
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# No caching between requests unless a test turns it on
TEAMFLOW_DASHBOARD_CACHE_SECONDS = 0

# Keep test output quiet
LOGGING['handlers'] = {
    'null': {'class': 'logging.NullHandler'},
}
LOGGING['root']['handlers'] = ['null']
LOGGING['loggers'] = {
    'django': {'handlers': ['null'], 'propagate': False},
    'apps': {'handlers': ['null'], 'propagate': False},
}
