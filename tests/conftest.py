"""Shared fixtures: the provider's public stage merchant."""

import pytest


MERCHANT_ID = "2000132"
HASH_KEY = "5294y06JbISpM5x9"
HASH_IV = "v77hoKGq4kWxNNIS"


@pytest.fixture
def credentials():
    return MERCHANT_ID, HASH_KEY, HASH_IV


@pytest.fixture
def encoder():
    from shared.checkmac import CheckMacEncoder
    return CheckMacEncoder(HASH_KEY, HASH_IV)


@pytest.fixture
def catalog():
    from logistics.catalog import OperationCatalog
    return OperationCatalog(MERCHANT_ID, HASH_KEY, HASH_IV)


@pytest.fixture
def signed(encoder):
    """Sign a notification or reply the way the provider does."""
    def sign(data):
        return encoder.encode_payload(data)
    return sign
