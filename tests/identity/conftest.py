import pytest


@pytest.fixture()
def verifier(settings):
    from identity.auth import TokenVerifier

    return TokenVerifier(settings)
