import pytest


@pytest.fixture()
def shop(vendor_with_shop):
    return vendor_with_shop[1]


@pytest.fixture()
def vendor(vendor_with_shop):
    return vendor_with_shop[0]
