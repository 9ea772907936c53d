"""Runs the shared storage contract against the in-memory fake.

Keeps the fake honest: core tests and CLI tests rely on it behaving like
a real backend.
"""

import pytest

from dgauth.tests.conformance import AuthStoreContract
from dgauth.tests.fakes.store import FakeAuthStore, FakeStoreInspector


class TestFakeAuthStore(AuthStoreContract):
    """AuthStoreContract against FakeAuthStore."""

    @pytest.fixture
    def store(self) -> FakeAuthStore:
        return FakeAuthStore()

    @pytest.fixture
    def inspector(self, store: FakeAuthStore) -> FakeStoreInspector:
        return FakeStoreInspector(store)
