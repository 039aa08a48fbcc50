"""Tests for the user directory and auth helpers."""

import pytest

from medicore.access import Role
from medicore.core.auth import create_access_token, decode_token, hash_password, verify_password
from medicore.core.exceptions import AuthenticationError
from medicore.core.users import INVALID_CREDENTIALS, Operator, UserAccount, UserDirectory


@pytest.fixture(scope="module")
def directory():
    return UserDirectory.with_demo_accounts("123456")


class TestUserDirectory:
    def test_one_demo_account_per_role(self, directory):
        assert len(directory) == len(Role)

    def test_authenticate(self, directory):
        operator = directory.authenticate("doctor1", "123456")

        assert operator.role == Role.DOCTOR
        assert operator.id == "D001"

    @pytest.mark.parametrize("username,password", [("doctor1", "wrong"), ("nobody", "123456")])
    def test_bad_credentials_same_message(self, directory, username, password):
        with pytest.raises(AuthenticationError) as exc:
            directory.authenticate(username, password)
        assert str(exc.value) == INVALID_CREDENTIALS

    def test_inactive_account(self):
        operator = Operator(id="X1", name="停用", role=Role.NURSE)
        directory = UserDirectory([UserAccount(username="old", password_hash=hash_password("pw"), operator=operator, active=False)])

        with pytest.raises(AuthenticationError):
            directory.authenticate("old", "pw")
        assert directory.get("X1") is None

    def test_operator_is_frozen(self, directory):
        operator = directory.get("C001")
        with pytest.raises(Exception):
            operator.role = Role.SUPERADMIN


class TestTokens:
    def test_round_trip(self, test_settings):
        token = create_access_token("D001", "doctor", test_settings)
        claims = decode_token(token, test_settings)

        assert claims["sub"] == "D001"
        assert claims["type"] == "access"

    def test_wrong_secret(self, test_settings):
        token = create_access_token("D001", "doctor", test_settings)
        other = test_settings.model_copy(update={"jwt_secret": "other"})

        assert decode_token(token, other) is None

    def test_password_hash(self):
        hashed = hash_password("123456")
        assert verify_password("123456", hashed)
        assert not verify_password("654321", hashed)
