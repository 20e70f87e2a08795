import pytest


@pytest.fixture(autouse=True)
def _plain_http_test_settings(settings):
    # The test client talks plain http://testserver
    settings.SECURE_SSL_REDIRECT = False
    settings.SESSION_COOKIE_SECURE = False
    settings.CSRF_COOKIE_SECURE = False
    settings.SECURE_HSTS_SECONDS = 0

    # Business-rule settings start from their documented defaults in every test
    settings.DMS_REORDER_MULTIPLIER = 3
    settings.DMS_DEFAULT_INTER_STATE = False
