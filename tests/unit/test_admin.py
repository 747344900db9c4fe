"""Test admin configuration of the ledger."""

import pytest

from endorsement_ledger import Context, EndorsementLedger, ErrorCode, LedgerParams
from endorsement_ledger.errors import (
    EndorsementError,
    InvalidDecayFactorError,
    InvalidLockPeriodError,
    InvalidMaxEndorsersError,
    InvalidMinStakeError,
    NotAuthorizedError,
)

ADMIN = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
BOB = "SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7"
OTHER = "SP3FAKE"


@pytest.fixture
def ledger():
    return EndorsementLedger(ADMIN)


@pytest.mark.parametrize(
    ("setter", "value"),
    [
        ("min_stake_amount", 200),
        ("max_stake_amount", 20000),
        ("stake_lock_period", 288),
        ("score_decay_factor", 90),
        ("score_decay_factor", 100),
        ("min_endorsers", 5),
        ("max_endorsers_per_user", 100),
        ("score_threshold", 1000),
        ("verification_required", False),
    ],
)
def test_setters(ledger: EndorsementLedger, setter: str, value):
    params = getattr(ledger, f"set_{setter}")(Context(ADMIN), value)
    assert getattr(params, setter) == value
    assert getattr(ledger.params, setter) == value


@pytest.mark.parametrize(
    ("setter", "value", "code"),
    [
        ("min_stake_amount", 0, ErrorCode.INVALID_MIN_STAKE),
        ("max_stake_amount", 50, ErrorCode.INVALID_MAX_STAKE),
        ("max_stake_amount", 100, ErrorCode.INVALID_MAX_STAKE),
        ("stake_lock_period", 0, ErrorCode.INVALID_LOCK_PERIOD),
        ("score_decay_factor", 0, ErrorCode.INVALID_DECAY_FACTOR),
        ("score_decay_factor", 101, ErrorCode.INVALID_DECAY_FACTOR),
        ("min_endorsers", 0, ErrorCode.INVALID_MIN_ENDORSERS),
        ("max_endorsers_per_user", 2, ErrorCode.INVALID_MAX_ENDORSERS),
        ("max_endorsers_per_user", 3, ErrorCode.INVALID_MAX_ENDORSERS),
        ("score_threshold", 0, ErrorCode.INVALID_SCORE_THRESHOLD),
    ],
)
def test_setters_rejected(ledger: EndorsementLedger, setter: str, value, code):
    before = ledger.params
    with pytest.raises(EndorsementError) as info:
        getattr(ledger, f"set_{setter}")(Context(ADMIN), value)
    assert info.value.code == code
    assert ledger.params == before


@pytest.mark.parametrize(
    ("setter", "value", "error"),
    [
        ("verification_required", "no", TypeError),
        ("verification_required", 1, TypeError),
        ("stake_lock_period", 1.5, InvalidLockPeriodError),
        ("min_stake_amount", True, InvalidMinStakeError),
        ("score_decay_factor", "90", InvalidDecayFactorError),
        ("max_endorsers_per_user", None, InvalidMaxEndorsersError),
    ],
)
def test_setters_reject_wrong_type(ledger: EndorsementLedger, setter: str, value, error):
    before = ledger.params
    with pytest.raises(error):
        getattr(ledger, f"set_{setter}")(Context(ADMIN), value)
    assert ledger.params == before
    assert type(getattr(ledger.params, setter)) is type(getattr(before, setter))


@pytest.mark.parametrize(
    ("setter", "value"),
    [
        ("min_stake_amount", 200),
        # Authorization is checked before the value
        ("max_stake_amount", 50),
        ("stake_lock_period", 0),
        ("score_decay_factor", 101),
        ("min_endorsers", 5),
        ("max_endorsers_per_user", 100),
        ("score_threshold", 1000),
        ("verification_required", False),
    ],
)
def test_setters_admin_only(ledger: EndorsementLedger, setter: str, value):
    before = ledger.params
    with pytest.raises(NotAuthorizedError):
        getattr(ledger, f"set_{setter}")(Context(OTHER), value)
    assert ledger.params == before


def test_setters_only_check_their_own_invariant(ledger: EndorsementLedger):
    params = ledger.set_min_stake_amount(Context(ADMIN), 20000)
    assert params.min_stake_amount == 20000
    assert params.max_stake_amount == 10000


def test_max_stake_checked_against_current_min(ledger: EndorsementLedger):
    ledger.set_min_stake_amount(Context(ADMIN), 500)
    with pytest.raises(EndorsementError) as info:
        ledger.set_max_stake_amount(Context(ADMIN), 400)
    assert info.value.code == ErrorCode.INVALID_MAX_STAKE
    ledger.set_max_stake_amount(Context(ADMIN), 501)


def test_params_apply_to_future_endorsements_only(ledger: EndorsementLedger):
    admin = Context(ADMIN)
    ledger.verify_user(admin, ADMIN)
    ledger.endorse_user(admin, BOB, 100, "community", 50)
    ledger.set_min_stake_amount(admin, 500)
    ledger.set_stake_lock_period(admin, 10)

    assert ledger.get_endorsement(0).stake_amount == 100
    assert ledger.update_endorsee_score(BOB) == 5000
    ledger.revoke_endorsement(Context(ADMIN, 10), 0, "Lock period shortened")


def test_verify_user(ledger: EndorsementLedger):
    assert not ledger.get_verification_status(BOB)
    ledger.verify_user(Context(ADMIN), BOB)
    assert ledger.get_verification_status(BOB)
    # Idempotent
    ledger.verify_user(Context(ADMIN), BOB)
    assert ledger.get_verification_status(BOB)


def test_verify_user_admin_only(ledger: EndorsementLedger):
    with pytest.raises(NotAuthorizedError) as info:
        ledger.verify_user(Context(OTHER), BOB)
    assert info.value.code == ErrorCode.NOT_AUTHORIZED
    assert not ledger.get_verification_status(BOB)


def test_custom_params():
    params = LedgerParams(min_stake_amount=1, max_stake_amount=10, stake_lock_period=1)
    ledger = EndorsementLedger(ADMIN, params)
    assert ledger.params is params
