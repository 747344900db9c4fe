"""Endorsement ledger.

The ledger owns every endorsement, the per-principal indices derived from
them and the admin-mutable parameters. Each operation runs under a single
lock and checks all of its preconditions before touching state, so a
rejected operation leaves the ledger exactly as it found it.
"""

import copy
import functools
import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, ContextManager, Dict, List, Tuple, Type, TypeVar

from pydantic import StrictInt, TypeAdapter, ValidationError

from endorsement_ledger.config import LedgerParams
from endorsement_ledger.errors import (
    DuplicateEndorsementError,
    EndorsementError,
    EndorsementNotFoundError,
    EndorserLimitReachedError,
    EndorserNotVerifiedError,
    InsufficientStakeError,
    InvalidCategoryError,
    InvalidDecayFactorError,
    InvalidLockPeriodError,
    InvalidMaxEndorsersError,
    InvalidMaxStakeError,
    InvalidMinEndorsersError,
    InvalidMinStakeError,
    InvalidRevocationReasonError,
    InvalidScoreThresholdError,
    InvalidStakeAmountError,
    InvalidVerificationStatusError,
    InvalidWeightError,
    NotAuthorizedError,
    RevocationNotAllowedError,
    SelfEndorsementError,
    StakeLockPeriodError,
)
from endorsement_ledger.models import (
    MAX_WEIGHT,
    MIN_WEIGHT,
    Category,
    Endorsement,
    Revocation,
)
from endorsement_ledger.scoring import weighted_score

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_STRICT_INT = TypeAdapter(StrictInt)
_PARAM_TYPES = {
    name: TypeAdapter(info.annotation)
    for name, info in LedgerParams.model_fields.items()
}


@dataclass(frozen=True)
class Context:
    """Ambient values supplied by the host ledger with each call."""

    caller: str
    block_height: int = 0


@dataclass
class LedgerState:
    """Complete ledger state.

    `endorsement_keys` and `endorsee_endorsements` are secondary indices over
    `endorsements`; they are updated in the same step as the primary table.
    """

    admin_principal: str
    params: LedgerParams
    next_endorsement_id: int = 0
    contract_balance: int = 0
    endorsements: Dict[int, Endorsement] = field(default_factory=dict)
    endorsement_keys: Dict[Tuple[str, str], int] = field(default_factory=dict)
    endorsee_endorsements: Dict[str, List[int]] = field(default_factory=dict)
    endorsee_scores: Dict[str, int] = field(default_factory=dict)
    endorser_stakes: Dict[str, int] = field(default_factory=dict)
    revocations: Dict[int, Revocation] = field(default_factory=dict)
    verification_status: Dict[str, bool] = field(default_factory=dict)


def _operation(func: Callable[..., T]) -> Callable[..., T]:
    """Serialize an operation on the ledger lock and log rejections."""

    @functools.wraps(func)
    def _wrapped(self: "EndorsementLedger", *args, **kwargs) -> T:
        with self._lock:
            try:
                return func(self, *args, **kwargs)
            except EndorsementError as error:
                LOGGER.debug(
                    "%s rejected: %s (%d) %s",
                    func.__name__,
                    error.kind,
                    error.code,
                    error.message,
                )
                raise

    return _wrapped


def _is_int(value: Any) -> bool:
    try:
        _STRICT_INT.validate_python(value)
    except ValidationError:
        return False
    return True


def _parse_category(category: Category | str) -> Category:
    try:
        return Category(category)
    except ValueError:
        raise InvalidCategoryError(f"Unknown category {category!r}") from None


class EndorsementLedger:
    """Stake-backed endorsement ledger."""

    def __init__(self, admin_principal: str, params: LedgerParams | None = None):
        """Initialize an empty ledger.

        Args:
            admin_principal: The principal allowed to configure the ledger and
                verify users and endorsements; fixed for the ledger's lifetime
            params: Initial parameters; defaults apply if omitted
        """
        self._lock = threading.RLock()
        self._state = LedgerState(
            admin_principal=admin_principal,
            params=params or LedgerParams(),
        )

    def _require_admin(self, ctx: Context):
        if ctx.caller != self._state.admin_principal:
            raise NotAuthorizedError(f"{ctx.caller} is not the ledger admin")

    def _lookup(self, endorsement_id: int) -> Endorsement:
        endorsement = self._state.endorsements.get(endorsement_id)
        if endorsement is None:
            raise EndorsementNotFoundError(f"No endorsement with id {endorsement_id}")
        return endorsement

    def _recompute_score(self, endorsee: str) -> int:
        state = self._state
        score = weighted_score(
            state.endorsee_endorsements.get(endorsee, ()), state.endorsements
        )
        state.endorsee_scores[endorsee] = score
        return score

    def _check_param(
        self, name: str, value: Any, error: Type[Exception] = TypeError
    ) -> Any:
        try:
            return _PARAM_TYPES[name].validate_python(value, strict=True)
        except ValidationError:
            raise error(f"Invalid type for {name}: {value!r}") from None

    def _update_params(self, ctx: Context, **changes) -> LedgerParams:
        # model_copy skips cross-field validation; each setter checks only
        # its own invariant.
        self._state.params = self._state.params.model_copy(update=changes)
        LOGGER.info("%s updated ledger params: %s", ctx.caller, changes)
        return self._state.params

    # Endorsement lifecycle

    @_operation
    def endorse_user(
        self,
        ctx: Context,
        endorsee: str,
        stake_amount: int,
        category: Category | str,
        weight: int,
    ) -> int:
        """Stake on an endorsee and return the new endorsement id."""
        state = self._state
        params = state.params
        endorser = ctx.caller

        if endorser == endorsee:
            raise SelfEndorsementError("Cannot endorse yourself")
        if not _is_int(stake_amount) or not (
            params.min_stake_amount <= stake_amount <= params.max_stake_amount
        ):
            raise InvalidStakeAmountError(
                f"Stake must be between {params.min_stake_amount} and "
                f"{params.max_stake_amount}"
            )
        category = _parse_category(category)
        if not _is_int(weight) or not MIN_WEIGHT <= weight <= MAX_WEIGHT:
            raise InvalidWeightError(
                f"Weight must be between {MIN_WEIGHT} and {MAX_WEIGHT}"
            )
        endorsement_ids = state.endorsee_endorsements.get(endorsee, [])
        if len(endorsement_ids) >= params.max_endorsers_per_user:
            raise EndorserLimitReachedError(
                f"{endorsee} already has {len(endorsement_ids)} endorsements"
            )
        key = (endorser, endorsee)
        if key in state.endorsement_keys:
            raise DuplicateEndorsementError(f"{endorser} already endorsed {endorsee}")
        if params.verification_required and not state.verification_status.get(
            endorser, False
        ):
            raise EndorserNotVerifiedError(f"{endorser} is not verified")

        endorsement_id = state.next_endorsement_id
        state.endorsements[endorsement_id] = Endorsement(
            id=endorsement_id,
            endorser=endorser,
            endorsee=endorsee,
            stake_amount=stake_amount,
            timestamp=ctx.block_height,
            category=category,
            weight=weight,
        )
        state.endorsement_keys[key] = endorsement_id
        state.endorsee_endorsements.setdefault(endorsee, []).append(endorsement_id)
        state.endorser_stakes[endorser] = (
            state.endorser_stakes.get(endorser, 0) + stake_amount
        )
        state.contract_balance += stake_amount
        state.next_endorsement_id += 1
        score = self._recompute_score(endorsee)

        LOGGER.info(
            "Endorsement %d: %s staked %d on %s (%s, weight %d); score now %d",
            endorsement_id,
            endorser,
            stake_amount,
            endorsee,
            category.value,
            weight,
            score,
        )
        return endorsement_id

    @_operation
    def revoke_endorsement(
        self, ctx: Context, endorsement_id: int, reason: str
    ) -> Revocation:
        """Revoke one of the caller's endorsements once its lock period ends.

        Stake is released from the endorser's committed total, but only as far
        as it has not already been withdrawn.
        """
        state = self._state
        endorsement = self._lookup(endorsement_id)

        if endorsement.endorser != ctx.caller:
            raise NotAuthorizedError(
                f"Only {endorsement.endorser} may revoke endorsement {endorsement_id}"
            )
        if not endorsement.active:
            raise RevocationNotAllowedError(
                f"Endorsement {endorsement_id} is already revoked"
            )
        if not reason:
            raise InvalidRevocationReasonError("A revocation reason is required")
        unlocks_at = endorsement.timestamp + state.params.stake_lock_period
        if ctx.block_height < unlocks_at:
            raise StakeLockPeriodError(
                f"Endorsement {endorsement_id} is locked until block {unlocks_at}"
            )

        endorsement.active = False
        revocation = Revocation(
            endorsement_id=endorsement_id,
            revoked_at=ctx.block_height,
            reason=reason,
        )
        state.revocations[endorsement_id] = revocation
        committed = state.endorser_stakes.get(ctx.caller, 0)
        released = min(endorsement.stake_amount, committed)
        state.endorser_stakes[ctx.caller] = committed - released
        state.contract_balance -= released
        score = self._recompute_score(endorsement.endorsee)

        LOGGER.info(
            "Endorsement %d revoked by %s at block %d (%s); score of %s now %d",
            endorsement_id,
            ctx.caller,
            ctx.block_height,
            reason,
            endorsement.endorsee,
            score,
        )
        return revocation

    @_operation
    def verify_endorsement(self, ctx: Context, endorsement_id: int) -> Endorsement:
        """Mark an endorsement verified.

        Revoked endorsements may still be verified.
        """
        endorsement = self._lookup(endorsement_id)
        self._require_admin(ctx)
        if endorsement.verified:
            raise InvalidVerificationStatusError(
                f"Endorsement {endorsement_id} is already verified"
            )

        endorsement.verified = True
        self._recompute_score(endorsement.endorsee)
        LOGGER.info("Endorsement %d verified", endorsement_id)
        return replace(endorsement)

    @_operation
    def update_endorsee_score(self, endorsee: str) -> int:
        """Recompute and cache the score of an endorsee."""
        score = self._recompute_score(endorsee)
        LOGGER.debug("Score of %s recomputed: %d", endorsee, score)
        return score

    @_operation
    def withdraw_stake(self, ctx: Context, amount: int) -> int:
        """Withdraw from the caller's committed stake; return what remains."""
        state = self._state
        if not _is_int(amount) or amount < 0:
            raise InvalidStakeAmountError(
                "Withdrawal amount must be a non-negative integer"
            )
        committed = state.endorser_stakes.get(ctx.caller, 0)
        if amount > committed:
            raise InsufficientStakeError(
                f"{ctx.caller} has {committed} staked, cannot withdraw {amount}"
            )

        state.endorser_stakes[ctx.caller] = committed - amount
        state.contract_balance -= amount
        LOGGER.info("%s withdrew %d of stake", ctx.caller, amount)
        return committed - amount

    # Admin configuration

    @_operation
    def set_min_stake_amount(self, ctx: Context, value: int) -> LedgerParams:
        """Set the minimum stake for new endorsements."""
        self._require_admin(ctx)
        value = self._check_param("min_stake_amount", value, InvalidMinStakeError)
        if value <= 0:
            raise InvalidMinStakeError("Minimum stake must be positive")
        return self._update_params(ctx, min_stake_amount=value)

    @_operation
    def set_max_stake_amount(self, ctx: Context, value: int) -> LedgerParams:
        """Set the maximum stake for new endorsements."""
        self._require_admin(ctx)
        value = self._check_param("max_stake_amount", value, InvalidMaxStakeError)
        if value <= self._state.params.min_stake_amount:
            raise InvalidMaxStakeError("Maximum stake must exceed the minimum stake")
        return self._update_params(ctx, max_stake_amount=value)

    @_operation
    def set_stake_lock_period(self, ctx: Context, value: int) -> LedgerParams:
        """Set the number of blocks before an endorsement may be revoked."""
        self._require_admin(ctx)
        value = self._check_param("stake_lock_period", value, InvalidLockPeriodError)
        if value <= 0:
            raise InvalidLockPeriodError("Lock period must be positive")
        return self._update_params(ctx, stake_lock_period=value)

    @_operation
    def set_score_decay_factor(self, ctx: Context, value: int) -> LedgerParams:
        """Set the score decay factor, a percentage in (0, 100]."""
        self._require_admin(ctx)
        value = self._check_param(
            "score_decay_factor", value, InvalidDecayFactorError
        )
        if value <= 0 or value > 100:
            raise InvalidDecayFactorError("Decay factor must be in (0, 100]")
        return self._update_params(ctx, score_decay_factor=value)

    @_operation
    def set_min_endorsers(self, ctx: Context, value: int) -> LedgerParams:
        """Set the minimum endorser count consumed by eligibility checks."""
        self._require_admin(ctx)
        value = self._check_param("min_endorsers", value, InvalidMinEndorsersError)
        if value <= 0:
            raise InvalidMinEndorsersError("Minimum endorsers must be positive")
        return self._update_params(ctx, min_endorsers=value)

    @_operation
    def set_max_endorsers_per_user(self, ctx: Context, value: int) -> LedgerParams:
        """Set how many endorsements a single endorsee may receive."""
        self._require_admin(ctx)
        value = self._check_param(
            "max_endorsers_per_user", value, InvalidMaxEndorsersError
        )
        if value <= self._state.params.min_endorsers:
            raise InvalidMaxEndorsersError(
                "Maximum endorsers must exceed the minimum endorsers"
            )
        return self._update_params(ctx, max_endorsers_per_user=value)

    @_operation
    def set_score_threshold(self, ctx: Context, value: int) -> LedgerParams:
        """Set the score threshold consumed by eligibility checks."""
        self._require_admin(ctx)
        value = self._check_param(
            "score_threshold", value, InvalidScoreThresholdError
        )
        if value <= 0:
            raise InvalidScoreThresholdError("Score threshold must be positive")
        return self._update_params(ctx, score_threshold=value)

    @_operation
    def set_verification_required(self, ctx: Context, value: bool) -> LedgerParams:
        """Require endorsers to be verified before endorsing."""
        self._require_admin(ctx)
        value = self._check_param("verification_required", value)
        return self._update_params(ctx, verification_required=value)

    @_operation
    def verify_user(self, ctx: Context, principal: str):
        """Mark a principal verified; this cannot be undone."""
        self._require_admin(ctx)
        self._state.verification_status[principal] = True
        LOGGER.info("Principal %s verified", principal)

    # Queries

    def get_endorsement(self, endorsement_id: int) -> Endorsement | None:
        """Get an endorsement by id."""
        with self._lock:
            endorsement = self._state.endorsements.get(endorsement_id)
            return replace(endorsement) if endorsement else None

    def get_revocation(self, endorsement_id: int) -> Revocation | None:
        """Get the revocation record of an endorsement."""
        with self._lock:
            return self._state.revocations.get(endorsement_id)

    def get_endorsee_score(self, endorsee: str) -> int:
        """Get the cached score of an endorsee."""
        with self._lock:
            return self._state.endorsee_scores.get(endorsee, 0)

    def get_endorser_stake(self, endorser: str) -> int:
        """Get the stake an endorser has committed."""
        with self._lock:
            return self._state.endorser_stakes.get(endorser, 0)

    def get_endorsee_endorsements(self, endorsee: str) -> List[int]:
        """Get the ids of every endorsement targeting an endorsee, oldest first."""
        with self._lock:
            return list(self._state.endorsee_endorsements.get(endorsee, ()))

    def get_verification_status(self, principal: str) -> bool:
        """Check whether a principal is verified."""
        with self._lock:
            return self._state.verification_status.get(principal, False)

    @property
    def admin_principal(self) -> str:
        """Ledger administrator."""
        return self._state.admin_principal

    @property
    def next_endorsement_id(self) -> int:
        """Id the next endorsement will receive."""
        with self._lock:
            return self._state.next_endorsement_id

    @property
    def contract_balance(self) -> int:
        """Total stake currently committed across all endorsers."""
        with self._lock:
            return self._state.contract_balance

    @property
    def params(self) -> LedgerParams:
        """Current ledger parameters."""
        with self._lock:
            return self._state.params

    def snapshot(self) -> LedgerState:
        """Return a consistent deep copy of the full ledger state."""
        with self._lock:
            return copy.deepcopy(self._state)

    def atomic(self) -> ContextManager:
        """Hold the ledger lock across several calls.

        Operations called inside the block see no interleaved writes from
        other threads.
        """
        return self._lock
