import hashlib

import pytest

from hashtree.core.hashing import concat_aggregate, hashlib_hash
from hashtree.core.settings import get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached; reset around every test so monkeypatched env applies."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sha1():
    return hashlib_hash("sha1")


@pytest.fixture
def sha1_aggregate(sha1):
    return concat_aggregate(sha1)


@pytest.fixture
def tagged_aggregate():
    """
    Aggregate whose output depends on how many digests were passed,
    so an empty contribution is distinguishable from an omitted one.
    """

    def aggregate(digests):
        hasher = hashlib.sha256()
        hasher.update(str(len(digests)).encode())
        for digest in digests:
            hasher.update(b"|")
            hasher.update(digest)
        return hasher.digest()

    return aggregate
