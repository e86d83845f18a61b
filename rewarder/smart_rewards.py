"""
End to end flow for a user's smart rewards.

For one campaign:
    resolve campaign -> fetch historical claims -> fetch eligibility -> reconcile
    -> (optionally) build claim arguments -> submit

Validation is all-or-nothing and any failure aborts the campaign. The one place
failures are tolerated is `get_user_claimable_campaigns`, where a campaign that
cannot be reconciled is skipped and the rest still go through.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from tinydb import TinyDB
from web3 import Web3

from rewarder.claims import (
    build_claim_arguments,
    estimate_claim_gas,
    get_rewarder_contract,
    submit_claim,
    to_base_unit_records,
)
from rewarder.env import SUBGRAPHS
from rewarder.errors import (
    ArgumentAssemblyError,
    CampaignNotFoundError,
    ConversionError,
    SmartRewardsError,
    SubmissionError,
    ValidationError,
)
from rewarder.events import ErrorContext, EventRecorder, LoggingRecorder
from rewarder.models import (
    Campaign,
    CampaignReport,
    CampaignRewards,
    ClaimableCampaign,
    ClaimTransactionResult,
    EligibilityRecord,
    EthereumAddress,
    FormattedReconciliation,
    HistoricalClaim,
)
from rewarder.queries import (
    enrich_campaign,
    fetch_all_campaigns,
    fetch_eligibility_records,
    fetch_historical_claims,
    token_cache,
    w3 as default_w3,
)
from rewarder.rewards import perform_calculations, summarise_historical_claims
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

logger = logging.getLogger(__name__)


@dataclass
class SmartRewardsClient:
    """
    :param `url`: rewards GraphQL API
    :param `w3`: web3 instance used for token reads and claim submission
    :param `rewarders`: SmartRewarder contract per chain id, needed to claim
    :param `sender`: account claims are sent from
    :param `recorder`: where skipped campaigns and pagination problems are reported
    """

    url: str = SUBGRAPHS.SMART_REWARDS
    w3: Optional[Web3] = None
    rewarders: dict[int, EthereumAddress] = field(default_factory=dict)
    sender: Optional[EthereumAddress] = None
    recorder: EventRecorder = field(default_factory=LoggingRecorder)
    page_size: int = 50
    cache: TinyDB = field(default_factory=token_cache)

    @property
    def has_onchain_capability(self) -> bool:
        return self.w3 is not None and self.sender is not None

    # ---- campaigns

    def get_campaigns(self, chain_id: int) -> list[Campaign]:
        return fetch_all_campaigns(
            chain_id, self.page_size, url=self.url, recorder=self.recorder
        )

    def _with_precision(self, campaign: Campaign) -> Campaign:
        if campaign.precision is not None:
            return campaign
        logger.info(
            "Reading decimals for reward token %s of campaign %s",
            campaign.rewardToken.id,
            campaign.campaignId,
        )
        return enrich_campaign(campaign, cache=self.cache, _w3=self.w3 or default_w3)

    def get_campaign_by_id(self, chain_id: int, campaign_id: int) -> Campaign:
        campaigns = self.get_campaigns(chain_id)
        campaign = next((c for c in campaigns if c.campaignId == campaign_id), None)
        if campaign is None:
            raise CampaignNotFoundError(
                f"Campaign {campaign_id} not found on chain {chain_id}",
                campaign_id=campaign_id,
                chain_id=chain_id,
            )
        return self._with_precision(campaign)

    # ---- records

    def get_eligibility_records(
        self, user: EthereumAddress, chain_id: int, campaign_id: int
    ) -> list[EligibilityRecord]:
        validate_user_address(user)
        validate_chain_id(chain_id)
        validate_campaign_id(campaign_id)
        return fetch_eligibility_records(
            user, chain_id, campaign_id, url=self.url, recorder=self.recorder
        )

    def get_historical_claims(
        self,
        pool: EthereumAddress,
        chain_id: int,
        user: EthereumAddress,
        campaign_id: Optional[int] = None,
    ) -> list[HistoricalClaim]:
        validate_pool_address(pool)
        validate_chain_id(chain_id)
        validate_user_address(user)

        claims = fetch_historical_claims(
            pool, chain_id, user, url=self.url, recorder=self.recorder
        )
        if campaign_id is None:
            return claims

        validate_campaign_id(campaign_id)
        return [c for c in claims if campaign_number(c.campaignId) == campaign_id]

    # ---- reconciliation

    def calculate_rewards(
        self,
        user: EthereumAddress,
        chain_id: int,
        campaign_id: int,
        campaign: Optional[Campaign] = None,
    ) -> CampaignRewards:
        """
        Fetch, validate and reconcile one campaign.
        Pass `campaign` if it is already known to skip the directory lookup.
        """
        if campaign is None:
            campaign = self.get_campaign_by_id(chain_id, campaign_id)
        else:
            campaign = self._with_precision(campaign)

        logger.info("Fetching historical claims for pool %s...", campaign.liquidityPool)
        claims = self.get_historical_claims(campaign.liquidityPool, chain_id, user)

        logger.info("Fetching claim proofs for user %s, campaign %s...", user, campaign_id)
        records = self.get_eligibility_records(user, chain_id, campaign_id)
        if len(records) == 0:
            raise SmartRewardsError(
                f"No eligibility records found for campaign {campaign_id}",
                user=user,
                campaign_id=campaign_id,
                chain_id=chain_id,
            )

        precision = campaign.rewardToken.decimals
        try:
            validate_historical_claims(claims, user)
            validate_eligibility_records(records, user, campaign_id)
            records = latest_snapshots(records)
            calculations = perform_calculations(records, claims, campaign_id, precision)
        except (ValidationError, ConversionError) as e:
            raise type(e)(
                str(e), user=user, campaign_id=campaign_id, chain_id=chain_id
            ) from e

        return CampaignRewards(
            user=user,
            chainId=chain_id,
            campaign=campaign,
            precision=precision,
            records=records,
            claims=claims,
            calculations=calculations,
            claimsRollup=summarise_historical_claims(claims),
        )

    def can_user_claim(
        self, user: EthereumAddress, chain_id: int, campaign_id: int
    ) -> tuple[FormattedReconciliation, str]:
        """Human readable balance for a campaign plus the reward token symbol"""
        rewards = self.calculate_rewards(user, chain_id, campaign_id)
        symbol = rewards.campaign.symbol
        return rewards.formatted, symbol

    def process_campaign(
        self,
        user: EthereumAddress,
        chain_id: int,
        campaign_id: int,
        execute: bool = False,
    ) -> CampaignReport:
        rewards = self.calculate_rewards(user, chain_id, campaign_id)
        formatted = rewards.formatted

        transaction = None
        if execute and rewards.calculations.canClaim:
            transaction = self.execute_claim(chain_id, rewards.records, rewards.precision)
        elif execute:
            logger.info("Nothing left to claim for campaign %s", campaign_id)

        return CampaignReport(
            rewards=rewards,
            formatted=formatted,
            rewardTokenSymbol=rewards.campaign.symbol,
            transaction=transaction,
        )

    def get_user_claimable_campaigns(
        self,
        user: EthereumAddress,
        chain_id: int,
        campaigns: list[Campaign],
        limit: Optional[int] = None,
    ) -> list[ClaimableCampaign]:
        """
        Reconcile each campaign in turn. A campaign that fails (no proofs, bad records,
        API errors...) is recorded and skipped so the others still get reported.
        Sorted claimable first, then by largest remaining amount.
        """
        if limit is not None:
            campaigns = campaigns[:limit]

        results: list[ClaimableCampaign] = []
        for campaign in campaigns:
            try:
                rewards = self.calculate_rewards(
                    user, chain_id, campaign.campaignId, campaign=campaign
                )
            except Exception as e:  # one campaign must not sink the batch
                logger.warning("Skipping campaign %s: %s", campaign.campaignId, e)
                self.recorder.record(
                    e,
                    ErrorContext(
                        operation="get_user_claimable_campaigns",
                        chain_id=chain_id,
                        campaign_id=campaign.campaignId,
                        user=user,
                    ),
                )
                continue

            results.append(
                ClaimableCampaign(
                    campaign=rewards.campaign,
                    canClaim=rewards.calculations.canClaim,
                    remaining=rewards.formatted.remaining,
                    calculations=rewards.calculations,
                )
            )

        return sorted(results, key=lambda r: (not r.canClaim, -Decimal(r.remaining)))

    # ---- claiming

    def _require_onchain(self) -> tuple[Web3, EthereumAddress]:
        if self.w3 is None or self.sender is None:
            raise SmartRewardsError(
                "On-chain client not configured. Provide w3, sender and rewarder addresses."
            )
        return self.w3, self.sender

    def _submit(
        self, chain_id: int, records: list[EligibilityRecord]
    ) -> ClaimTransactionResult:
        w3, sender = self._require_onchain()
        args = build_claim_arguments(records)
        contract = get_rewarder_contract(w3, self.rewarders, chain_id)
        # a batch can span users and campaigns, only a single one is reported
        users = {a.lower() for a in args.accounts}
        user = args.accounts[0] if len(users) == 1 else None
        campaign_ids = set(args.campaignIds)
        campaign_id = campaign_ids.pop() if len(campaign_ids) == 1 else None
        try:
            return submit_claim(w3, contract, args, sender)
        except SubmissionError as e:
            e.user = e.user or user
            e.campaign_id = e.campaign_id or campaign_id
            e.chain_id = e.chain_id or chain_id
            self.recorder.record(
                e,
                ErrorContext(
                    operation="execute_claim",
                    chain_id=chain_id,
                    campaign_id=campaign_id,
                    user=user,
                ),
            )
            raise

    def claim_single(
        self, chain_id: int, record: EligibilityRecord
    ) -> ClaimTransactionResult:
        return self._submit(chain_id, [record])

    def claim_batch(
        self, chain_id: int, records: list[EligibilityRecord]
    ) -> ClaimTransactionResult:
        if len(records) == 0:
            raise ArgumentAssemblyError("No proofs provided for batch claim")
        return self._submit(chain_id, records)

    def execute_claim(
        self, chain_id: int, records: list[EligibilityRecord], precision: int
    ) -> ClaimTransactionResult:
        """
        Claim every record in one transaction.
        Amounts are converted from decimals to base units before the arguments are built.
        """
        if len(records) == 0:
            raise ArgumentAssemblyError("No proofs available for claiming", chain_id=chain_id)

        base_unit_records = to_base_unit_records(records, precision)
        if len(base_unit_records) == 1:
            return self.claim_single(chain_id, base_unit_records[0])
        return self.claim_batch(chain_id, base_unit_records)

    def estimate_claim_gas(
        self, chain_id: int, records: list[EligibilityRecord], precision: int
    ) -> int:
        w3, sender = self._require_onchain()
        args = build_claim_arguments(to_base_unit_records(records, precision))
        contract = get_rewarder_contract(w3, self.rewarders, chain_id)
        return estimate_claim_gas(contract, args, sender)
