from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from rewarder.models.Campaign import Campaign
from rewarder.models.Claim import (
    ClaimTransactionResult,
    EligibilityRecord,
    HistoricalClaim,
)
from rewarder.models.types import BigNumber


class ReconciliationResult(BaseModel):
    """
    Outcome of reconciling one campaign for one user, all amounts in base units
    :param `totalEligible`: sum of the user's eligibility records
    :param `totalClaimed`: sum of the user's past claims for the campaign
    :param `remaining`: eligible - claimed, floored at zero
    :param `canClaim`: remaining > 0
    """

    totalEligible: BigNumber
    totalClaimed: BigNumber
    remaining: BigNumber
    canClaim: bool


class FormattedReconciliation(BaseModel):
    """Same as `ReconciliationResult` but with decimal strings, for display only"""

    totalEligible: str
    totalClaimed: str
    remaining: str
    canClaim: bool


class ClaimsRollup(BaseModel):
    """
    Totals across every historical claim fetched for the pool,
    regardless of campaign. Display only, never used to compute a balance.
    """

    totalClaims: int = 0
    totalAmount: str = "0"
    latestTimestamp: int = 0
    campaigns: list[str] = []
    claimIds: list[str] = []


class EligibilityStats(BaseModel):
    totalRecords: int = 0
    totalAmount: str = "0"
    latestBlock: int = 0
    campaigns: list[int] = []


class CampaignRewards(BaseModel):
    """Everything fetched and computed for one (user, campaign)"""

    user: str
    chainId: int
    campaign: Campaign
    precision: int
    records: list[EligibilityRecord]
    claims: list[HistoricalClaim]
    calculations: ReconciliationResult
    claimsRollup: ClaimsRollup

    @property
    def formatted(self) -> FormattedReconciliation:
        # avoid a circular import with the rewards package
        from rewarder.rewards.reconcile import format_calculations

        return format_calculations(self.calculations, self.precision)


class CampaignReport(BaseModel):
    """Result of the end to end flow for a single campaign"""

    rewards: CampaignRewards
    formatted: FormattedReconciliation
    rewardTokenSymbol: str = "Unknown"
    transaction: Optional[ClaimTransactionResult] = None


class ClaimableCampaign(BaseModel):
    campaign: Campaign
    canClaim: bool
    remaining: str
    calculations: ReconciliationResult
