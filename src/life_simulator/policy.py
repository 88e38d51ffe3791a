"""
life_simulator/policy.py - Policy Templates and Policy Groups

Immutable value types describing the contracts being projected.

- Policy: contract template (holder, issue timing, term, amounts, product)
- PolicyGroup: a Policy plus a weighted count (a model point)

Timing convention:
- Months are integers relative to the simulation epoch (month 0)
- A policy issued before the epoch has a negative issue month
- Duration in years = max(elapsed months, 0) // 12

Policies are never mutated. Premium and account value updates go through
`dataclasses.replace`, so a group recorded in an event keeps the values it
had when it was recorded.

Author: Life Simulator Project
License: MIT
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class Sex(Enum):
    """Policy holder sex."""
    MALE = "M"
    FEMALE = "F"

    @classmethod
    def from_code(cls, code: str) -> "Sex":
        """Parse 'M'/'F' (or 'male'/'female') into a Sex."""
        normalized = str(code).strip().upper()
        if normalized in ("M", "MALE"):
            return cls.MALE
        if normalized in ("F", "FEMALE"):
            return cls.FEMALE
        raise ValueError(f"Unknown sex code: {code!r}")


class PremiumType(Enum):
    """When premiums are due."""
    LEVEL = "level"    # every month
    SINGLE = "single"  # issue month only


@dataclass(frozen=True)
class Product:
    """Product features shared by every policy sold under it."""
    premium_type: PremiumType = PremiumType.LEVEL
    load_premium_rate: float = 0.0


@dataclass(frozen=True)
class Policy:
    """
    Insurance contract template.

    Attributes:
        sex: Policy holder sex
        age: Issue age in whole years
        issued_at: Issue month relative to the simulation epoch
        term: Term in years (None for whole of life)
        assured: Assured amount paid on death
        premium: Premium amount per policy
        account_value: Account value per policy (account products)
        product: Product the policy was sold under
    """
    sex: Sex = Sex.MALE
    age: int = 30
    issued_at: int = 0
    term: Optional[int] = 10
    assured: float = 100_000.0
    premium: float = 0.0
    account_value: float = 0.0
    product: Product = field(default_factory=Product)

    @property
    def expires_at(self) -> Optional[int]:
        """Month at which the policy reaches its term."""
        if self.term is None:
            return None
        return self.issued_at + 12 * self.term

    def expires(self, time: int) -> bool:
        return self.expires_at is not None and time == self.expires_at

    def expired_before(self, time: int) -> bool:
        """True if the term ended strictly before `time`."""
        return self.expires_at is not None and self.expires_at < time

    def elapsed_months(self, time: int) -> int:
        return time - self.issued_at

    def duration_years(self, time: int) -> int:
        """Completed policy years at `time` (0 before issue)."""
        return max(self.elapsed_months(time), 0) // 12

    def attained_age(self, time: int) -> int:
        return self.age + self.duration_years(time)

    def premium_due(self, time: int) -> float:
        """Premium payable at `time`; single premiums only in the issue month."""
        if self.product.premium_type == PremiumType.SINGLE and time != self.issued_at:
            return 0.0
        return self.premium


@dataclass(frozen=True)
class PolicyGroup:
    """A policy template standing in for `count` identical contracts."""
    policy: Policy
    count: float = 1.0

    def with_count(self, count: float) -> "PolicyGroup":
        return replace(self, count=count)

    def with_policy(self, **changes) -> "PolicyGroup":
        """Replace fields of the underlying policy, keeping the count."""
        return replace(self, policy=replace(self.policy, **changes))

    def expires(self, time: int) -> bool:
        return self.policy.expires(time)


def total_count(groups) -> float:
    """Sum of counts over an iterable of policy groups."""
    return float(sum(group.count for group in groups))
