import json
from copy import deepcopy
import os
from dataclasses import dataclass, field
from typing import Any, Optional
from unittest.mock import Mock

import pytest

from rewarder.config import load_conf
from rewarder.models import Campaign, Config, EligibilityRecord, HistoricalClaim

STUBS = os.path.join(os.path.dirname(__file__), "stubs")

USER = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
OTHER_USER = "0x9bc33f6155eFAcc290c3C50E9B5b24b668562732"
POOL = "0x88e6A0c2dDD26FEEb64F039a2c41296FcB3f5640"
REWARDER = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

PROOF_A = "0x" + "a" * 64
PROOF_B = "0x" + "b" * 64


def load_stub(name: str) -> dict[str, Any]:
    with open(os.path.join(STUBS, name)) as j:
        return json.load(j)


@dataclass
class MockResponse:
    res: dict[str, Any]
    status_code: int = 200

    def json(self):
        return self.res

    def raise_for_status(self):
        pass


@dataclass
class MockPoster:
    """Replays graphql responses in order and remembers what was posted"""

    responses: list[dict[str, Any]]
    calls: list[dict[str, Any]] = field(default_factory=list)

    def __call__(self, url, json=None, headers=None):
        self.calls.append(deepcopy(json))
        return MockResponse(self.responses[len(self.calls) - 1])


def mock_graphql(monkeypatch, responses: list[dict[str, Any]]) -> MockPoster:
    poster = MockPoster(responses)
    monkeypatch.setattr("rewarder.queries.common.requests.post", poster)
    return poster


def connection(nodes: list[dict], end_cursor=None, has_next_page=False) -> dict:
    return {
        "edges": [{"node": n} for n in nodes],
        "pageInfo": {"endCursor": end_cursor, "hasNextPage": has_next_page},
    }


def make_record(
    amount: str = "10",
    campaign_id: int = 1,
    user: str = USER,
    block: int = 100,
    proof: Optional[list[str]] = None,
) -> EligibilityRecord:
    return EligibilityRecord(
        chainId=1,
        lastIndexedBlock=block,
        user=user,
        campaignId=campaign_id,
        amount=amount,
        proofElements=[PROOF_A, PROOF_B] if proof is None else proof,
    )


def make_claim(
    amount: str = "1",
    campaign_id: str = "1",
    user: str = USER,
    timestamp: int = 1694000000,
    id: str = "0xfeed",
) -> HistoricalClaim:
    return HistoricalClaim(
        id=id,
        user=user,
        amount=amount,
        campaignId=campaign_id,
        chainId=1,
        timestampSeconds=timestamp,
    )


@pytest.fixture
def config() -> Config:
    return load_conf(os.path.join(STUBS, "config.json"))


@pytest.fixture
def campaigns() -> list[Campaign]:
    edges = load_stub("campaigns.json")["data"]["campaigns"]["edges"]
    return [Campaign.model_validate(e["node"]) for e in edges]


@pytest.fixture
def receipt() -> dict[str, Any]:
    return {
        "transactionHash": bytes.fromhex("ab" * 32),
        "blockNumber": 18300000,
        "gasUsed": 84000,
        "effectiveGasPrice": 30000000000,
        "status": 1,
        "logs": [],
    }


@pytest.fixture
def mock_contract() -> Mock:
    contract = Mock()
    contract.functions.claim.return_value.transact.return_value = bytes.fromhex(
        "ab" * 32
    )
    contract.functions.claim.return_value.estimate_gas.return_value = 100000
    contract.events.Claimed.return_value.process_receipt.return_value = [
        {"args": {"user": USER, "campaignId": 1, "amount": 10500000}}
    ]
    return contract
