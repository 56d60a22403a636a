import pytest


@pytest.fixture(autouse=True)
def _allow_channels_connection_cleanup(request, django_db_blocker):
    # channels calls close_old_connections() from the consumer task; under
    # pytest-django's global DB blocker that raises for SimpleTestCase tests,
    # whereas Django's own runner (which has no such blocker) lets it through.
    if request.module.__name__.endswith('test_consumers'):
        with django_db_blocker.unblock():
            yield
    else:
        yield
