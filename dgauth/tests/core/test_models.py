"""Unit tests for domain records and port contracts.

Tests verify record invariants, partial-update validation, and that the
port abstract base class cannot be satisfied partially.
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from dgauth.core.models import (
    Account,
    Session,
    User,
    VerificationToken,
    field_names,
    validate_changes,
)
from dgauth.core.ports import AuthStorePort

EXPIRES = datetime(2030, 1, 1, tzinfo=timezone.utc)


class TestUser:
    """Test User record."""

    def test_all_fields_optional(self) -> None:
        """A user can be created before the database assigns an id."""
        user = User()
        assert user.id is None
        assert user.email is None


class TestSession:
    """Test Session invariants."""

    def test_valid_session(self) -> None:
        session = Session(session_token="tok", user_id="0x1", expires=EXPIRES)
        assert session.id is None

    @pytest.mark.parametrize("token", ["", "   "])
    def test_rejects_blank_token(self, token: str) -> None:
        with pytest.raises(ValueError, match="session_token"):
            Session(session_token=token, user_id="0x1", expires=EXPIRES)

    def test_rejects_blank_user(self) -> None:
        with pytest.raises(ValueError, match="user_id"):
            Session(session_token="tok", user_id="", expires=EXPIRES)


class TestAccount:
    """Test Account invariants."""

    @pytest.mark.parametrize(
        "missing", ["user_id", "type", "provider", "provider_account_id"]
    )
    def test_requires_identifying_fields(self, missing: str) -> None:
        values = {
            "user_id": "0x1",
            "type": "oauth",
            "provider": "github",
            "provider_account_id": "42",
        }
        values[missing] = ""

        with pytest.raises(ValueError, match=missing):
            Account(**values)


class TestVerificationToken:
    """Test VerificationToken invariants."""

    def test_is_immutable(self) -> None:
        token = VerificationToken(identifier="a@example.com", token="t", expires=EXPIRES)

        with pytest.raises(FrozenInstanceError):
            token.token = "other"  # type: ignore[misc]

    def test_rejects_blank_identifier(self) -> None:
        with pytest.raises(ValueError, match="identifier"):
            VerificationToken(identifier="", token="t", expires=EXPIRES)


class TestValidateChanges:
    """Test partial update validation."""

    def test_field_names(self) -> None:
        assert field_names(User) == {"id", "name", "email", "image", "email_verified"}

    def test_accepts_known_fields(self) -> None:
        validate_changes(User, {"name": "Ada", "email_verified": EXPIRES})

    def test_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValueError, match="Unknown User fields: nickname"):
            validate_changes(User, {"nickname": "ada"})

    def test_rejects_id(self) -> None:
        with pytest.raises(ValueError, match="id"):
            validate_changes(Session, {"id": "0x2"})


class TestAuthStorePort:
    """Test the storage port contract."""

    def test_cannot_instantiate_port(self) -> None:
        with pytest.raises(TypeError):
            AuthStorePort()  # type: ignore[abstract]

    def test_partial_implementation_is_abstract(self) -> None:
        class OnlyUsers(AuthStorePort):
            async def get_user(self, user_id: str) -> User | None:
                return None

        with pytest.raises(TypeError):
            OnlyUsers()  # type: ignore[abstract]

    @pytest.mark.asyncio
    async def test_close_defaults_to_noop(self) -> None:
        from dgauth.tests.fakes import FakeAuthStore

        await AuthStorePort.close(FakeAuthStore())
