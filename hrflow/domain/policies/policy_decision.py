from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PolicyOutcome(str, Enum):
    ALLOW = "ALLOW"
    DENY = "DENY"


@dataclass(frozen=True)
class PolicyDecision:
    outcome: PolicyOutcome
    reason: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.outcome == PolicyOutcome.ALLOW
