"""
Restaurant CRM Backend - Access Policy & Credentials
=====================================================

What:  The ordered allow/deny rule list and the single provisioned account.
How:   AccessPolicy.requirement_for(path) walks its rules top to bottom and
       returns the requirement of the first rule whose pattern matches.
       CredentialStore keeps a bcrypt salted hash of the configured
       password, computed once at startup, and verifies Basic credentials
       against it.
Who:   Consulted by AccessPolicyMiddleware before any route runs.

Patterns:
    "/health"      exact path
    "/docs/**"     "/docs" itself and everything below it
    "/**"          every path

Policies:
    STANDARD_POLICY     probes, API docs and the DB console are open;
                        everything else requires the provisioned account
    PERMIT_ALL_POLICY   every path is open. Selected only by
                        ACCESS_POLICY=permit-all, which Settings refuses
                        when ENVIRONMENT=production.

Both policies and the credential store are built once and never mutated,
so concurrent requests read them without locking.
"""

import enum
import logging
import secrets
from dataclasses import dataclass
from typing import Tuple

import bcrypt
from starlette.concurrency import run_in_threadpool

from restaurant_crm.config import BCRYPT_MAX_PASSWORD_BYTES, Settings

logger = logging.getLogger(__name__)


class Requirement(str, enum.Enum):
    PERMIT = "PERMIT"
    AUTHENTICATED = "AUTHENTICATED"


@dataclass(frozen=True)
class AccessRule:
    pattern: str
    requirement: Requirement

    def matches(self, path: str) -> bool:
        if self.pattern.endswith("/**"):
            prefix = self.pattern[:-3]
            return path == prefix or path.startswith(prefix + "/")
        return path == self.pattern


@dataclass(frozen=True)
class AccessPolicy:
    """
    Ordered rule list, first match wins. A path no rule matches requires
    authentication.
    """

    name: str
    rules: Tuple[AccessRule, ...]

    def requirement_for(self, path: str) -> Requirement:
        for rule in self.rules:
            if rule.matches(path):
                return rule.requirement
        return Requirement.AUTHENTICATED

    def permits_anonymous(self, path: str) -> bool:
        return self.requirement_for(path) is Requirement.PERMIT


STANDARD_POLICY = AccessPolicy(
    name="standard",
    rules=(
        # Health / info probes
        AccessRule("/health", Requirement.PERMIT),
        AccessRule("/info", Requirement.PERMIT),
        # Interactive API documentation
        AccessRule("/docs/**", Requirement.PERMIT),
        AccessRule("/redoc/**", Requirement.PERMIT),
        AccessRule("/openapi.json", Requirement.PERMIT),
        # Development database console (not mounted in production)
        AccessRule("/db-console/**", Requirement.PERMIT),
        AccessRule("/**", Requirement.AUTHENTICATED),
    ),
)

PERMIT_ALL_POLICY = AccessPolicy(
    name="permit-all",
    rules=(AccessRule("/**", Requirement.PERMIT),),
)


def select_policy(config: Settings) -> AccessPolicy:
    """Maps the ACCESS_POLICY setting onto one of the two policies."""
    if config.access_policy == "permit-all":
        logger.warning(
            "ACCESS_POLICY=permit-all: authentication is DISABLED for every path "
            "(environment=%s)",
            config.environment,
        )
        return PERMIT_ALL_POLICY
    return STANDARD_POLICY


class CredentialStore:
    """
    One username and the bcrypt hash of its password, held in memory for
    the process lifetime. The plain password is not kept.
    """

    def __init__(self, username: str, password_hash: bytes):
        self._username = username
        self._password_hash = password_hash

    @classmethod
    def from_settings(cls, config: Settings) -> "CredentialStore":
        password = config.auth_password.get_secret_value().encode("utf-8")
        password_hash = bcrypt.hashpw(password, bcrypt.gensalt(rounds=config.auth_bcrypt_rounds))
        return cls(config.auth_username, password_hash)

    @property
    def username(self) -> str:
        return self._username

    def verify(self, username: str, password: str) -> bool:
        """
        Constant-time username comparison, then bcrypt.checkpw. The hash
        check runs even when the username is wrong, so both cases take
        about the same time.
        """
        username_ok = secrets.compare_digest(
            username.encode("utf-8"), self._username.encode("utf-8")
        )
        candidate = password.encode("utf-8")
        # bcrypt only accepts up to 72 bytes; longer input can never match
        if len(candidate) > BCRYPT_MAX_PASSWORD_BYTES:
            return False
        password_ok = bcrypt.checkpw(candidate, self._password_hash)
        return username_ok and password_ok

    async def verify_async(self, username: str, password: str) -> bool:
        """verify() on the threadpool; bcrypt is CPU-bound."""
        return await run_in_threadpool(self.verify, username, password)
