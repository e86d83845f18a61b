from typing import Optional

import eth_utils as eth
from pydantic import BaseModel, ConfigDict, Field

from rewarder.models.types import BigNumber, Bytes32, EthereumAddress


class EligibilityRecord(BaseModel):
    """
    A claim proof: the user's cumulative reward allotment for one campaign,
    attested by a merkle membership proof.

    :param `lastIndexedBlock`: block the allotment was computed up to. The amount is
    cumulative to date, so a newer snapshot supersedes an older one rather than adding to it.
    :param `amount`: decimal string as served by the API
    :param `proofElements`: bytes32 hex strings, opaque to us and checked by the contract
    """

    model_config = ConfigDict(populate_by_name=True)

    chainId: int
    lastIndexedBlock: int = Field(alias="lastBlockUpdatedTo")
    user: EthereumAddress
    campaignId: int
    amount: str
    proofElements: list[Bytes32] = Field(alias="proof")


class HistoricalClaim(BaseModel):
    """
    One already executed on chain withdrawal.
    The API returns the campaign id as a string, so it is kept as one here.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    user: EthereumAddress
    amount: str
    campaignId: str = Field(alias="campaign")
    chainId: int
    timestampSeconds: int = Field(alias="timestamp")


class ClaimArguments(BaseModel):
    """
    The four parallel arrays consumed by a single `claim` call on the SmartRewarder.
    Entry `i` of each list belongs to the same (user, campaign) leaf.
    """

    accounts: list[EthereumAddress]
    campaignIds: list[int]
    amounts: list[BigNumber]
    proofSequences: list[list[Bytes32]]

    def __len__(self) -> int:
        return len(self.accounts)

    def to_call(self) -> tuple[list[str], list[int], list[int], list[list[bytes]]]:
        """Convert to the python types web3 encodes as address[], uint256[], uint256[], bytes32[][]"""
        return (
            [eth.to_checksum_address(a) for a in self.accounts],
            list(self.campaignIds),
            [int(a) for a in self.amounts],
            [[eth.to_bytes(hexstr=p) for p in proof] for proof in self.proofSequences],
        )


class ClaimEvent(BaseModel):
    """Decoded `Claimed` log, carrying the amount actually credited"""

    user: EthereumAddress
    campaignId: int
    amount: BigNumber


class ClaimTransactionResult(BaseModel):
    transactionHash: str
    blockNumber: int
    gasUsed: str
    effectiveGasPrice: str = "0"
    status: int
    events: list[ClaimEvent] = []

    @property
    def total_claimed(self) -> Optional[int]:
        if not self.events:
            return None
        return sum(int(e.amount) for e in self.events)
