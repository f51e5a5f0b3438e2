from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from resumatch.errors import ValidationError
from resumatch.types import APPLICATION_STATUSES

StatusPolicyName = Literal["permissive", "strict"]

STRICT_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"reviewing", "interview", "accepted", "rejected"}),
    "reviewing": frozenset({"interview", "accepted", "rejected"}),
    "interview": frozenset({"reviewing", "accepted", "rejected"}),
    "accepted": frozenset(),
    "rejected": frozenset(),
}


@dataclass(slots=True)
class StatusPolicy:
    policy: StatusPolicyName

    def check(self, current: str, target: str) -> None:
        if target not in APPLICATION_STATUSES:
            raise ValidationError("Invalid status value")

        if current == target or self.policy == "permissive":
            return

        if self.policy == "strict":
            if target not in STRICT_TRANSITIONS.get(current, frozenset()):
                raise ValidationError(f"Cannot move an application from {current} to {target}")
            return

        raise ValueError(f"unsupported status policy '{self.policy}'")
