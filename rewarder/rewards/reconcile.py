from decimal import Decimal, localcontext

from rewarder.errors import ConversionError
from rewarder.models import (
    BigNumber,
    ClaimsRollup,
    EligibilityRecord,
    EligibilityStats,
    FormattedReconciliation,
    HistoricalClaim,
    ReconciliationResult,
)
from rewarder.units import (
    compare_base_units,
    from_base_units,
    subtract_base_units,
    sum_base_units,
    to_base_units,
)
from rewarder.validation import campaign_number


def calculate_total_eligible(
    records: list[EligibilityRecord], precision: int
) -> BigNumber:
    """
    Sum of every eligibility record passed, in base units.
    The caller decides which snapshots to pass: records are cumulative,
    so passing two snapshots of the same campaign double counts.
    """
    return sum_base_units(to_base_units(r.amount, precision) for r in records)


def calculate_total_claimed(
    claims: list[HistoricalClaim], campaign_id: int, precision: int
) -> BigNumber:
    """Sum of past claims whose campaign id is numerically equal to `campaign_id`"""
    return sum_base_units(
        to_base_units(c.amount, precision)
        for c in claims
        if campaign_number(c.campaignId) == campaign_id
    )


def calculate_remaining(total_eligible: BigNumber, total_claimed: BigNumber) -> BigNumber:
    return subtract_base_units(total_eligible, total_claimed)


def perform_calculations(
    records: list[EligibilityRecord],
    claims: list[HistoricalClaim],
    campaign_id: int,
    precision: int,
) -> ReconciliationResult:
    """
    Reconcile eligibility against past claims for a single campaign.

    :param `records`: validated, deduplicated eligibility records for the campaign
    :param `claims`: the user's historical claims, any campaign. Filtered here.
    :param `campaign_id`: campaign to reconcile
    :param `precision`: reward token decimals
    """
    try:
        total_eligible = calculate_total_eligible(records, precision)
        total_claimed = calculate_total_claimed(claims, campaign_id, precision)
    except ConversionError as e:
        raise ConversionError(
            f"Failed to perform calculations for campaign {campaign_id}: {e}",
            user=e.user,
            campaign_id=campaign_id,
            chain_id=e.chain_id,
        ) from e

    remaining = calculate_remaining(total_eligible, total_claimed)

    return ReconciliationResult(
        totalEligible=total_eligible,
        totalClaimed=total_claimed,
        remaining=remaining,
        canClaim=compare_base_units(remaining, "0") > 0,
    )


def format_calculations(
    calculations: ReconciliationResult, precision: int
) -> FormattedReconciliation:
    return FormattedReconciliation(
        totalEligible=from_base_units(calculations.totalEligible, precision),
        totalClaimed=from_base_units(calculations.totalClaimed, precision),
        remaining=from_base_units(calculations.remaining, precision),
        canClaim=calculations.canClaim,
    )


def _decimal_sum(amounts) -> str:
    with localcontext() as ctx:
        # amounts are up to 78 digits, the default context keeps 28
        ctx.prec = 100
        total = sum((Decimal(a) for a in amounts), Decimal(0))
        if not total:
            return "0"
        # normalize drops trailing zeros, format avoids scientific notation
        return format(total.normalize(), "f")


def summarise_historical_claims(claims: list[HistoricalClaim]) -> ClaimsRollup:
    """
    Roll up every historical claim fetched for the pool, across campaigns.
    Claims of different campaigns can be in different tokens, so this is only a display figure.
    """
    if len(claims) == 0:
        return ClaimsRollup()

    return ClaimsRollup(
        totalClaims=len(claims),
        totalAmount=_decimal_sum(c.amount for c in claims),
        latestTimestamp=max(c.timestampSeconds for c in claims),
        campaigns=list(dict.fromkeys(c.campaignId for c in claims)),
        claimIds=[c.id for c in claims],
    )


def summarise_eligibility(records: list[EligibilityRecord]) -> EligibilityStats:
    if len(records) == 0:
        return EligibilityStats()

    return EligibilityStats(
        totalRecords=len(records),
        totalAmount=_decimal_sum(r.amount for r in records),
        latestBlock=max(r.lastIndexedBlock for r in records),
        campaigns=list(dict.fromkeys(r.campaignId for r in records)),
    )
