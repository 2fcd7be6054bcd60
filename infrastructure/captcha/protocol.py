"""CaptchaVerifier protocol and its three-way result.

A verification either passes (VERIFIED), is refused (REJECTED, carrying a
CaptchaError), or could not be carried out because the verification backend
misbehaved (DEGRADED). DEGRADED lets the submission through; callers only
need to act on REJECTED.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Protocol


class CaptchaErrorKind(str, enum.Enum):
    CLIENT_ERROR = "client_error"
    INCORRECT_SECRET = "incorrect_secret"
    SOLUTION_INVALID = "solution_invalid"
    SOLUTION_TIMEOUT_OR_DUPLICATE = "solution_timeout_or_duplicate"
    UNRECOGNIZED_ERROR = "unrecognized_error"


# Kinds the submitter can fix by solving the puzzle again
_CLIENT_FAULTS = {
    CaptchaErrorKind.CLIENT_ERROR,
    CaptchaErrorKind.SOLUTION_INVALID,
    CaptchaErrorKind.SOLUTION_TIMEOUT_OR_DUPLICATE,
}


@dataclass(frozen=True)
class CaptchaError:
    kind: CaptchaErrorKind
    description: str
    errors: list[str] = field(default_factory=list)

    @property
    def is_client_fault(self) -> bool:
        return self.kind in _CLIENT_FAULTS


class VerificationStatus(str, enum.Enum):
    VERIFIED = "verified"
    REJECTED = "rejected"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class VerificationResult:
    status: VerificationStatus
    error: Optional[CaptchaError] = None
    reason: Optional[str] = None

    @classmethod
    def verified(cls) -> "VerificationResult":
        return cls(VerificationStatus.VERIFIED)

    @classmethod
    def rejected(cls, error: CaptchaError) -> "VerificationResult":
        return cls(VerificationStatus.REJECTED, error=error)

    @classmethod
    def degraded(cls, reason: str) -> "VerificationResult":
        return cls(VerificationStatus.DEGRADED, reason=reason)

    @property
    def passed(self) -> bool:
        return self.status is not VerificationStatus.REJECTED


class CaptchaVerifier(Protocol):
    async def verify(self, solution: str) -> VerificationResult: ...
