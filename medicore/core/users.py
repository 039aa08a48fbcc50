"""Operator accounts and credential checks.

The directory is an explicit object handed to whoever needs it; there is no
module-level user store.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from medicore.access.roles import Role
from medicore.core.auth import hash_password, verify_password
from medicore.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


class Operator(BaseModel):
    """The signed-in user as seen by the rest of the system.

    Frozen: the role cannot change once an encounter session has started.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    role: Role
    department: Optional[str] = None


class UserAccount(BaseModel):
    username: str
    password_hash: str
    operator: Operator
    active: bool = True


class UserDirectory:
    """In-process account lookup used by the login endpoint."""

    def __init__(self, accounts: Iterable[UserAccount] = ()):
        self._by_username: dict[str, UserAccount] = {}
        self._by_id: dict[str, UserAccount] = {}
        for account in accounts:
            self.add(account)

    def add(self, account: UserAccount) -> None:
        self._by_username[account.username] = account
        self._by_id[account.operator.id] = account

    def __len__(self) -> int:
        return len(self._by_username)

    def get(self, user_id: str) -> Optional[Operator]:
        account = self._by_id.get(user_id)
        if account is None or not account.active:
            return None
        return account.operator

    def authenticate(self, username: str, password: str) -> Operator:
        """Return the operator for valid credentials.

        Raises:
            AuthenticationError: unknown user, inactive account or wrong password.
                The message is the same in every case.
        """
        account = self._by_username.get(username)
        if account is None or not account.active or not verify_password(password, account.password_hash):
            logger.info(f"Login rejected for username={username!r}")
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info(f"Login accepted for user={account.operator.id} role={account.operator.role.value}")
        return account.operator

    @classmethod
    def with_demo_accounts(cls, password: str) -> "UserDirectory":
        """One account per role, sharing ``password``."""
        pw_hash = hash_password(password)
        return cls(
            UserAccount(username=username, password_hash=pw_hash, operator=operator)
            for username, operator in DEMO_OPERATORS
        )


DEMO_OPERATORS: tuple[tuple[str, Operator], ...] = (
    ("superadmin", Operator(id="SA001", name="超级管理员", role=Role.SUPERADMIN)),
    ("doctor1", Operator(id="D001", name="张医生", role=Role.DOCTOR, department="内科")),
    ("nurse1", Operator(id="N001", name="李护士", role=Role.NURSE, department="内科")),
    ("director1", Operator(id="DIR001", name="王主任", role=Role.DIRECTOR, department="内科")),
    ("admin1", Operator(id="A001", name="管理员", role=Role.ADMIN)),
    ("cashier1", Operator(id="C001", name="赵收费员", role=Role.CASHIER)),
    ("pharmacist1", Operator(id="P001", name="钱药剂师", role=Role.PHARMACIST)),
    ("technician1", Operator(id="T001", name="孙技师", role=Role.TECHNICIAN)),
    ("receptionist1", Operator(id="R001", name="周导医", role=Role.RECEPTIONIST)),
)
