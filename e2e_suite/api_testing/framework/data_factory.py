"""
================================================================================
Test Data Factory
================================================================================

Factories for unique, collision-free test records.

Features:
- User and product records with a uniqueness-bearing token
- Filesystem-safe timestamps for unique names
- Random alphanumeric strings of an exact length

Nothing here is persisted. Records only reach a backing store through the
API or UI actions a test performs with them.

================================================================================
"""

import random
import string
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Optional, Set
from uuid import uuid4


ALPHABET = string.ascii_lowercase + string.digits

USER_EMAIL_DOMAIN = "qa.example.com"
TOKEN_LENGTH = 10


# ================================================================================
# Data Models
# ================================================================================

@dataclass
class UserRecord:
    """Generated user attributes. `email` is unique within the run."""
    name: str
    email: str
    password: str
    role: str = "editor"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ProductRecord:
    """Generated product attributes. `sku` is unique within the run."""
    name: str
    sku: str
    price: float
    description: str
    category: str = "Electronics"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ================================================================================
# Helpers
# ================================================================================

def make_random_string(length: int = 8, rng: Optional[random.Random] = None) -> str:
    """
    Generate a random string of exactly `length` chars from [a-z0-9].

    No uniqueness guarantee beyond statistical collision resistance.
    """
    if length < 0:
        raise ValueError(f"length must be >= 0, got {length}")
    chooser = rng or random
    return "".join(chooser.choice(ALPHABET) for _ in range(length))


def make_timestamp(now: Optional[datetime] = None) -> str:
    """
    Current UTC time as a sortable, filesystem-safe token.

    Example: "2026-02-19T10-30-45-123Z"
    """
    now = now or datetime.now(timezone.utc)
    iso = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    iso = iso.replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


# ================================================================================
# Factory
# ================================================================================

class DataFactory:
    """
    Factory for user and product records.

    Tokens used for email and SKU come from uuid4 and are remembered for the
    lifetime of the process, so two records from the same worker never share
    one. Across xdist workers uniqueness rests on the 40 random bits.

    Usage:
        factory = DataFactory()
        user = factory.create_user()
        product = factory.create_product(category="Books")
    """

    ROLES = ("admin", "editor", "viewer")
    DEFAULT_CATEGORY = "Electronics"

    _issued_tokens: ClassVar[Set[str]] = set()

    def __init__(self, seed: Optional[int] = None):
        """
        Args:
            seed: Seed for the non-unique fields (prices, random strings)
        """
        self._rng = random.Random(seed)

    def _unique_token(self, length: int = TOKEN_LENGTH) -> str:
        """Generate a token never issued before in this process."""
        while True:
            token = uuid4().hex[:length]
            if token not in self._issued_tokens:
                self._issued_tokens.add(token)
                return token

    def random_string(self, length: int = 8) -> str:
        return make_random_string(length, rng=self._rng)

    def create_user(self, role: str = "editor", **overrides: Any) -> UserRecord:
        """
        Create a unique user record.

        Args:
            role: One of ROLES
            **overrides: Field overrides applied after generation
        """
        if role not in self.ROLES:
            raise ValueError(f"Unknown role {role!r}, expected one of {self.ROLES}")

        token = self._unique_token()
        user = UserRecord(
            name=f"Test User {token}",
            email=f"test.user.{token}@{USER_EMAIL_DOMAIN}",
            password=f"Passw0rd!{token}",
            role=role,
        )
        return replace(user, **overrides)

    def create_product(self, **overrides: Any) -> ProductRecord:
        """Create a unique product record. SKU is `SKU-<TOKEN>`."""
        token = self._unique_token()
        product = ProductRecord(
            name=f"Product {token}",
            sku=f"SKU-{token.upper()}",
            price=round(self._rng.uniform(9.99, 109.99), 2),
            description=f"Auto-generated product for test run {token}",
            category=self.DEFAULT_CATEGORY,
        )
        return replace(product, **overrides)


__all__ = [
    "DataFactory",
    "ProductRecord",
    "UserRecord",
    "make_random_string",
    "make_timestamp",
]
