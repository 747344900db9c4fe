"""Endorsement ledger errors.

Every failure of a ledger operation is raised as a subclass of
:class:`EndorsementError`. Each kind carries a stable numeric code so hosts
can relay failures without depending on the exception hierarchy.
"""

from enum import IntEnum
from typing import Dict, Type


class ErrorCode(IntEnum):
    """Stable numeric codes for ledger failures."""

    NOT_AUTHORIZED = 100
    INVALID_STAKE_AMOUNT = 102
    SELF_ENDORSEMENT = 104
    DUPLICATE_ENDORSEMENT = 105
    ENDORSEMENT_NOT_FOUND = 106
    INSUFFICIENT_STAKE = 107
    INVALID_SCORE_THRESHOLD = 108
    INVALID_DECAY_FACTOR = 109
    INVALID_MAX_ENDORSERS = 110
    INVALID_MIN_ENDORSERS = 111
    ENDORSER_LIMIT_REACHED = 112
    INVALID_CATEGORY = 114
    INVALID_WEIGHT = 115
    INVALID_REVOCATION_REASON = 117
    REVOCATION_NOT_ALLOWED = 118
    INVALID_MAX_STAKE = 121
    INVALID_MIN_STAKE = 122
    STAKE_LOCK_PERIOD = 123
    INVALID_LOCK_PERIOD = 124
    ENDORSER_NOT_VERIFIED = 125
    INVALID_VERIFICATION_STATUS = 127


class EndorsementError(Exception):
    """Raised when a ledger operation is rejected."""

    code: ErrorCode
    kind: str = "EndorsementError"

    def __init__(self, message: str | None = None):
        """Init exception."""
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def __init_subclass__(cls, code: ErrorCode | None = None, **kwargs):
        super().__init_subclass__(**kwargs)
        if code is not None:
            cls.code = code
            cls.kind = cls.__name__.removesuffix("Error")
            _REGISTRY[code] = cls


_REGISTRY: Dict[ErrorCode, Type[EndorsementError]] = {}


class NotAuthorizedError(EndorsementError, code=ErrorCode.NOT_AUTHORIZED):
    """Caller may not perform this operation."""


class InvalidStakeAmountError(EndorsementError, code=ErrorCode.INVALID_STAKE_AMOUNT):
    """Stake amount outside the configured bounds."""


class SelfEndorsementError(EndorsementError, code=ErrorCode.SELF_ENDORSEMENT):
    """Endorser and endorsee are the same principal."""


class DuplicateEndorsementError(
    EndorsementError, code=ErrorCode.DUPLICATE_ENDORSEMENT
):
    """Endorser already endorsed this endorsee."""


class EndorsementNotFoundError(
    EndorsementError, code=ErrorCode.ENDORSEMENT_NOT_FOUND
):
    """No endorsement with the given id."""


class InsufficientStakeError(EndorsementError, code=ErrorCode.INSUFFICIENT_STAKE):
    """Withdrawal exceeds committed stake."""


class InvalidScoreThresholdError(
    EndorsementError, code=ErrorCode.INVALID_SCORE_THRESHOLD
):
    """Score threshold must be positive."""


class InvalidDecayFactorError(EndorsementError, code=ErrorCode.INVALID_DECAY_FACTOR):
    """Decay factor must be in (0, 100]."""


class InvalidMaxEndorsersError(
    EndorsementError, code=ErrorCode.INVALID_MAX_ENDORSERS
):
    """Max endorsers per user must exceed min endorsers."""


class InvalidMinEndorsersError(
    EndorsementError, code=ErrorCode.INVALID_MIN_ENDORSERS
):
    """Min endorsers must be positive."""


class EndorserLimitReachedError(
    EndorsementError, code=ErrorCode.ENDORSER_LIMIT_REACHED
):
    """Endorsee already holds the maximum number of endorsements."""


class InvalidCategoryError(EndorsementError, code=ErrorCode.INVALID_CATEGORY):
    """Unknown endorsement category."""


class InvalidWeightError(EndorsementError, code=ErrorCode.INVALID_WEIGHT):
    """Weight must be in [1, 100]."""


class InvalidRevocationReasonError(
    EndorsementError, code=ErrorCode.INVALID_REVOCATION_REASON
):
    """Revocation reason must not be empty."""


class RevocationNotAllowedError(
    EndorsementError, code=ErrorCode.REVOCATION_NOT_ALLOWED
):
    """Endorsement is already revoked."""


class InvalidMaxStakeError(EndorsementError, code=ErrorCode.INVALID_MAX_STAKE):
    """Max stake must exceed min stake."""


class InvalidMinStakeError(EndorsementError, code=ErrorCode.INVALID_MIN_STAKE):
    """Min stake must be positive."""


class StakeLockPeriodError(EndorsementError, code=ErrorCode.STAKE_LOCK_PERIOD):
    """Stake is still within its lock period."""


class InvalidLockPeriodError(EndorsementError, code=ErrorCode.INVALID_LOCK_PERIOD):
    """Lock period must be positive."""


class EndorserNotVerifiedError(
    EndorsementError, code=ErrorCode.ENDORSER_NOT_VERIFIED
):
    """Endorser must be verified before endorsing."""


class InvalidVerificationStatusError(
    EndorsementError, code=ErrorCode.INVALID_VERIFICATION_STATUS
):
    """Endorsement is already verified."""


def error_for(code: ErrorCode | int) -> Type[EndorsementError]:
    """Look up the exception class for a numeric code."""
    return _REGISTRY[ErrorCode(code)]
