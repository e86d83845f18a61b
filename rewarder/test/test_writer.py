import json
import os

import pytest

from rewarder.errors import PaginationInconsistency
from rewarder.events import ErrorContext, MemoryRecorder
from rewarder.models import (
    CampaignReport,
    CampaignRewards,
    ClaimableCampaign,
    ClaimsRollup,
    ClaimTransactionResult,
    Config,
    ReconciliationResult,
    Writer,
)
from rewarder.models.Writer import columns, flatten
from rewarder.test.conftest import USER, make_record


@pytest.fixture
def writer(config: Config, tmp_path) -> Writer:
    return Writer(config, root=str(tmp_path))


def read(path: str) -> str:
    with open(path) as f:
        return f.read()


def test_paths(writer: Writer, config: Config, tmp_path):
    assert writer.path == f"{tmp_path}/{config.report_name}"
    assert writer.csv_path == f"{writer.path}/csv"
    assert writer.json_path == f"{writer.path}/json"


def test_create_dirs(writer: Writer):
    writer._create_dir()
    assert os.path.exists(writer.path)
    assert os.path.exists(writer.csv_path)
    assert os.path.exists(writer.json_path)


def test_flatten():
    assert flatten({"campaign": {"rewardToken": {"symbol": "USDC"}}, "canClaim": True}) == {
        "campaign_rewardToken_symbol": "USDC",
        "canClaim": True,
    }
    assert flatten({"proof": ["0xa", "0xb"]}) == {"proof_0": "0xa", "proof_1": "0xb"}


def test_columns_cover_every_row():
    assert columns([{"a": 1}, {"a": 2, "b": 3}]) == ["a", "b"]


@pytest.mark.parametrize(
    "data, assert_csv",
    [
        [
            [
                {"key1": 1, "key2": 2},
                {"key1": 3, "key2": 4},
            ],
            "key1,key2\n1,2\n3,4\n",
        ],
        [
            {"key1": 1, "key2": {"nested": 2}},
            "key1,key2_nested\n1,2\n",
        ],
        [
            [{"key1": 1}, {"key1": 2, "key2": 3}],
            "key1,key2\n1,\n2,3\n",
        ],
    ],
)
def test_to_csv_and_json(writer: Writer, data, assert_csv):
    writer.to_csv_and_json(data, "test")

    assert read(f"{writer.csv_path}/test.csv") == assert_csv
    assert json.loads(read(f"{writer.json_path}/test.json")) == data


def test_write_claimable(writer: Writer, campaigns):
    claimable = [
        ClaimableCampaign(
            campaign=campaigns[0],
            canClaim=True,
            remaining="10.5",
            calculations=ReconciliationResult(
                totalEligible="12750000",
                totalClaimed="2250000",
                remaining="10500000",
                canClaim=True,
            ),
        )
    ]
    writer.write_claimable(claimable)

    written = json.loads(read(f"{writer.json_path}/claimable.json"))
    assert written[0]["remaining"] == "10.5"
    assert written[0]["campaign"]["rewardToken"]["symbol"] == "USDC"

    header = read(f"{writer.csv_path}/claimable.csv").splitlines()[0].split(",")
    assert "campaign_rewardToken_symbol" in header
    assert "calculations_remaining" in header


def test_write_errors(writer: Writer):
    recorder = MemoryRecorder()
    recorder.record(
        PaginationInconsistency("no cursor"),
        ErrorContext(operation="fetch_all_campaigns", chain_id=1, page=3),
    )
    writer.write_errors(recorder.events)

    written = json.loads(read(f"{writer.json_path}/errors.json"))
    assert written[0]["error"] == "PaginationInconsistency"
    assert written[0]["message"] == "no cursor"
    assert written[0]["page"] == 3
    assert os.path.exists(f"{writer.csv_path}/errors.csv")


def test_write_claims(writer: Writer, campaigns):
    calculations = ReconciliationResult(
        totalEligible="2000000", totalClaimed="0", remaining="2000000", canClaim=True
    )
    rewards = CampaignRewards(
        user=USER,
        chainId=1,
        campaign=campaigns[0],
        precision=6,
        records=[make_record("2")],
        claims=[],
        calculations=calculations,
        claimsRollup=ClaimsRollup(),
    )
    report = CampaignReport(
        rewards=rewards,
        formatted=rewards.formatted,
        rewardTokenSymbol="USDC",
        transaction=ClaimTransactionResult(
            transactionHash="0xabc", blockNumber=1, gasUsed="84000", status=1
        ),
    )
    writer.write_claims([report])

    assert read(f"{writer.csv_path}/claims.csv").splitlines() == [
        "campaignId,symbol,claimed,transactionHash,gasUsed",
        "1,USDC,2,0xabc,84000",
    ]
    written = json.loads(read(f"{writer.json_path}/claims.json"))
    assert written[0]["transaction"]["transactionHash"] == "0xabc"
