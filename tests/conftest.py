import os

os.environ.setdefault("SECRET_KEY", "s3cr3t")

import pytest

from getclaps.core.keys import KeyPurpose, key_cache


@pytest.fixture
def signing_key():
    return key_cache.get("s3cr3t", KeyPurpose.SIGNING)


@pytest.fixture
def encryption_key():
    return key_cache.get("s3cr3t", KeyPurpose.ENCRYPTION)
