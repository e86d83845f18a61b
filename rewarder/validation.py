"""
Integrity checks run on records before their amounts are summed or sent on chain.

Every check is all-or-nothing: the first bad record raises `ValidationError` for the
whole batch. Bad records are never filtered out, because dropping one would silently
lower (or raise) the computed balance.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional

import eth_utils as eth

from rewarder.errors import ValidationError
from rewarder.models import EligibilityRecord, HistoricalClaim


def _positive_amount(amount: Optional[str]) -> bool:
    if not amount:
        return False
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        return False
    return value.is_finite() and value > 0


def campaign_number(campaign_id: str) -> Optional[Decimal]:
    """
    Parse the string campaign identifier found on historical claims.
    Returns None if it is not numeric.
    """
    try:
        value = Decimal(str(campaign_id).strip())
    except (InvalidOperation, TypeError, ValueError):
        return None
    return value if value.is_finite() else None


def validate_eligibility_records(
    records: list[EligibilityRecord], expected_user: str, expected_campaign_id: int
) -> None:
    for record in records:
        context = dict(
            user=expected_user,
            campaign_id=expected_campaign_id,
            chain_id=record.chainId,
        )
        if record.user.lower() != expected_user.lower():
            raise ValidationError(
                f"Proof user mismatch: expected {expected_user}, got {record.user}",
                **context,
            )

        if record.campaignId != expected_campaign_id:
            raise ValidationError(
                f"Proof campaign mismatch: expected {expected_campaign_id}, got {record.campaignId}",
                **context,
            )

        if len(record.proofElements) == 0:
            raise ValidationError("Empty proof array found", **context)

        if not _positive_amount(record.amount):
            raise ValidationError(f"Invalid proof amount: {record.amount}", **context)


def validate_historical_claims(
    claims: list[HistoricalClaim], expected_user: str
) -> None:
    for claim in claims:
        context = dict(user=expected_user, chain_id=claim.chainId)
        if claim.user.lower() != expected_user.lower():
            raise ValidationError(
                f"Claim user mismatch: expected {expected_user}, got {claim.user}",
                **context,
            )

        if not _positive_amount(claim.amount):
            raise ValidationError(f"Invalid claim amount: {claim.amount}", **context)

        if not claim.campaignId or campaign_number(claim.campaignId) is None:
            raise ValidationError(
                f"Invalid campaign ID in claim: {claim.campaignId}", **context
            )


def latest_snapshots(records: list[EligibilityRecord]) -> list[EligibilityRecord]:
    """
    Eligibility amounts are cumulative, so only the newest snapshot per (user, campaign)
    counts. Keeps the record with the highest `lastIndexedBlock` for each pair, in the
    order the pairs first appeared. On a tie the first record wins.
    """
    latest: dict[tuple[str, int], EligibilityRecord] = {}
    for record in records:
        key = (record.user.lower(), record.campaignId)
        current = latest.get(key)
        if current is None or record.lastIndexedBlock > current.lastIndexedBlock:
            latest[key] = record
    return list(latest.values())


# request guards, run before anything is sent to the API


def validate_user_address(user: str) -> None:
    if not user or not eth.is_hex_address(user):
        raise ValidationError(f"Invalid user address format: {user}", user=user)


def validate_pool_address(pool: str) -> None:
    if not pool or not eth.is_hex_address(pool):
        raise ValidationError(f"Invalid pool address format: {pool}")


def validate_chain_id(chain_id: int) -> None:
    if not chain_id or chain_id <= 0:
        raise ValidationError(f"Invalid chain ID: {chain_id}", chain_id=chain_id)


def validate_campaign_id(campaign_id: int) -> None:
    if not campaign_id or campaign_id <= 0:
        raise ValidationError(
            f"Invalid campaign ID: {campaign_id}", campaign_id=campaign_id
        )
