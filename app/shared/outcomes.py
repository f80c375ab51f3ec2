"""
Result types for actions with best-effort follow-ups.

A primary action (e.g. a reservation status change) either succeeds or raises.
Its follow-up side effects (slot release, notification dispatch) are attempted
at most once, never retried, and their failures are reported here instead of
being raised or rolled back.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class SideEffectResult:
    name: str
    ok: bool
    error: Optional[str] = None
    skipped: bool = False

    @classmethod
    def succeeded(cls, name: str) -> "SideEffectResult":
        return cls(name=name, ok=True)

    @classmethod
    def failed(cls, name: str, error: str) -> "SideEffectResult":
        return cls(name=name, ok=False, error=error)

    @classmethod
    def skip(cls, name: str, reason: str) -> "SideEffectResult":
        return cls(name=name, ok=True, error=reason, skipped=True)


@dataclass
class ActionOutcome:
    result: Any
    side_effects: list[SideEffectResult] = field(default_factory=list)

    @property
    def partial_failure(self) -> bool:
        """Primary action succeeded but at least one side effect did not"""
        return any(not effect.ok for effect in self.side_effects)

    def add(self, effect: SideEffectResult) -> SideEffectResult:
        self.side_effects.append(effect)
        return effect
