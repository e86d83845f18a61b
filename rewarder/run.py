import sys
from typing import Optional

from web3 import Web3

from rewarder.config import load_conf
from rewarder.env import RPC_URL
from rewarder.errors import CampaignNotFoundError
from rewarder.events import ErrorContext, MemoryRecorder
from rewarder.models import CampaignReport, ClaimableCampaign, Config, Writer
from rewarder.smart_rewards import SmartRewardsClient
from rewarder.utils import configure_logging, yes_or_no


def build_client(config: Config, recorder: MemoryRecorder) -> SmartRewardsClient:
    return SmartRewardsClient(
        w3=Web3(Web3.HTTPProvider(RPC_URL)),
        rewarders=config.rewarders,
        sender=config.sender,
        recorder=recorder,
        page_size=config.page_size,
    )


def reconcile_campaigns(
    config: Config, client: SmartRewardsClient
) -> list[ClaimableCampaign]:
    """Look up the configured campaigns in the directory once, then reconcile each of them"""
    directory = {c.campaignId: c for c in client.get_campaigns(config.chain_id)}

    campaigns = []
    for campaign_id in config.campaign_ids:
        if campaign_id not in directory:
            client.recorder.record(
                CampaignNotFoundError(
                    f"Campaign {campaign_id} not found on chain {config.chain_id}",
                    campaign_id=campaign_id,
                    chain_id=config.chain_id,
                ),
                ErrorContext(
                    operation="run",
                    chain_id=config.chain_id,
                    campaign_id=campaign_id,
                    user=config.user,
                ),
            )
            continue
        campaigns.append(directory[campaign_id])

    return client.get_user_claimable_campaigns(config.user, config.chain_id, campaigns)


def execute_claims(
    config: Config,
    client: SmartRewardsClient,
    claimable: list[ClaimableCampaign],
    confirm: bool = True,
    reports: Optional[list[CampaignReport]] = None,
) -> list[CampaignReport]:
    """
    Claim every claimable campaign in turn, stopping at the first failed claim.
    Each report is appended to `reports` as soon as its claim is mined, so a caller
    passing its own list still has the earlier transactions when a later one raises.
    """
    reports = [] if reports is None else reports
    for c in claimable:
        if not c.canClaim:
            continue
        question = f"Claim {c.remaining} {c.campaign.symbol} from campaign {c.campaign.campaignId}?"
        if confirm and not yes_or_no(question):
            continue
        report = client.process_campaign(
            config.user, config.chain_id, c.campaign.campaignId, execute=True
        )
        if report.transaction:
            print(f"✅ Claimed campaign {c.campaign.campaignId}: {report.transaction.transactionHash}")
        reports.append(report)
    return reports


def run(path_to_config: str, confirm: bool = True) -> list[ClaimableCampaign]:
    config = load_conf(path_to_config)
    recorder = MemoryRecorder()
    client = build_client(config, recorder)
    writer = Writer(config)

    print(f"⚗ Reconciling {len(config.campaign_ids)} campaigns for {config.user}...")
    claimable = reconcile_campaigns(config, client)

    for c in claimable:
        status = "claimable" if c.canClaim else "nothing to claim"
        print(
            f"  campaign {c.campaign.campaignId}: {c.remaining} {c.campaign.symbol} ({status})"
        )

    writer.write_claimable(claimable)

    reports: list[CampaignReport] = []
    try:
        if config.execute:
            execute_claims(config, client, claimable, confirm, reports)
    finally:
        # mined claims are written even if a later one failed
        if config.execute:
            writer.write_claims(reports)
        if recorder.events:
            print(f"⚠ {len(recorder.events)} problems recorded, see {writer.json_path}/errors.json")
            writer.write_errors(recorder.events)

    print(f"😃 Report written to {writer.path}")
    return claimable


def main(path: Optional[str] = None) -> None:
    configure_logging()
    if not path:
        path = sys.argv[1] if len(sys.argv) > 1 else input(" Path to the config file ")
    run(path)


if __name__ == "__main__":
    main()
