from decimal import Decimal

import pytest

from rewarder.errors import ValidationError
from rewarder.test.conftest import OTHER_USER, POOL, USER, make_claim, make_record
from rewarder.validation import (
    campaign_number,
    latest_snapshots,
    validate_campaign_id,
    validate_chain_id,
    validate_eligibility_records,
    validate_historical_claims,
    validate_pool_address,
    validate_user_address,
)


def test_valid_records_pass():
    records = [make_record("10"), make_record("0.5", block=200)]
    validate_eligibility_records(records, USER, 1)


def test_record_user_is_case_insensitive():
    validate_eligibility_records([make_record(user=USER.lower())], USER, 1)


@pytest.mark.parametrize(
    "record, message",
    [
        (make_record(user=OTHER_USER), "Proof user mismatch"),
        (make_record(campaign_id=2), "Proof campaign mismatch"),
        (make_record(proof=[]), "Empty proof array found"),
        (make_record(amount="0"), "Invalid proof amount"),
        (make_record(amount="-5"), "Invalid proof amount"),
        (make_record(amount="abc"), "Invalid proof amount"),
        (make_record(amount=""), "Invalid proof amount"),
        (make_record(amount="NaN"), "Invalid proof amount"),
    ],
)
def test_invalid_record_rejects_whole_batch(record, message):
    records = [make_record("10"), record, make_record("3", block=300)]
    with pytest.raises(ValidationError, match=message) as e:
        validate_eligibility_records(records, USER, 1)
    assert e.value.campaign_id == 1
    assert e.value.user == USER


def test_valid_claims_pass():
    claims = [make_claim("1", "1"), make_claim("2.5", "2"), make_claim("3", " 3 ")]
    validate_historical_claims(claims, USER.lower())


@pytest.mark.parametrize(
    "claim, message",
    [
        (make_claim(user=OTHER_USER), "Claim user mismatch"),
        (make_claim(amount="0"), "Invalid claim amount"),
        (make_claim(amount="-1"), "Invalid claim amount"),
        (make_claim(amount="Infinity"), "Invalid claim amount"),
        (make_claim(campaign_id=""), "Invalid campaign ID in claim"),
        (make_claim(campaign_id="abc"), "Invalid campaign ID in claim"),
    ],
)
def test_invalid_claim_rejects_whole_batch(claim, message):
    with pytest.raises(ValidationError, match=message):
        validate_historical_claims([make_claim(), claim], USER)


def test_campaign_number():
    assert campaign_number("1") == 1
    assert campaign_number("01") == 1
    assert campaign_number("1.0") == 1
    assert campaign_number(" 7 ") == Decimal(7)
    assert campaign_number("abc") is None
    assert campaign_number("NaN") is None


def test_latest_snapshots_keeps_highest_block():
    old = make_record("10", block=100)
    new = make_record("12", block=200)
    other = make_record("5", campaign_id=2, block=150)

    assert latest_snapshots([old, other, new]) == [new, other]


def test_latest_snapshots_groups_users_case_insensitively():
    a = make_record("10", user=USER, block=100)
    b = make_record("11", user=USER.lower(), block=101)
    assert latest_snapshots([a, b]) == [b]


def test_latest_snapshots_tie_keeps_first():
    first = make_record("10", block=100)
    second = make_record("20", block=100)
    assert latest_snapshots([first, second]) == [first]


def test_latest_snapshots_empty():
    assert latest_snapshots([]) == []


def test_request_guards():
    validate_user_address(USER)
    validate_pool_address(POOL)
    validate_chain_id(1)
    validate_campaign_id(1)

    with pytest.raises(ValidationError, match="Invalid user address format"):
        validate_user_address("0x123")
    with pytest.raises(ValidationError, match="Invalid pool address format"):
        validate_pool_address("")
    with pytest.raises(ValidationError, match="Invalid chain ID"):
        validate_chain_id(0)
    with pytest.raises(ValidationError, match="Invalid campaign ID"):
        validate_campaign_id(-1)
