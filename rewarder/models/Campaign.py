from typing import Optional

from pydantic import BaseModel

from rewarder.models.ERC20 import Token
from rewarder.models.types import EthereumAddress


class PageInfo(BaseModel):
    """
    Cursor pagination info attached to every connection in the rewards API
    :param `endCursor`: opaque token locating the start of the next page
    :param `hasNextPage`: whether the server claims there is more data
    """

    endCursor: Optional[str] = None
    hasNextPage: bool = False


class Campaign(BaseModel):
    """
    A time bounded, pool scoped incentive program.
    Only the fields needed to reconcile and claim are declared, the rest of the
    directory payload (apr, pool tokens, ipfs hashes...) is ignored.
    """

    id: str
    chainId: int
    campaignId: int
    liquidityPool: EthereumAddress
    rewardToken: Token
    name: Optional[str] = None
    campaignType: Optional[str] = None
    protocol: Optional[str] = None
    paused: bool = False
    closed: bool = False
    startBlock: Optional[int] = None
    endBlock: Optional[int] = None
    distributionAmount: Optional[str] = None
    campaignStartTimestamp: Optional[str] = None
    campaignEndTimestamp: Optional[str] = None

    # filled in from the token contract when requested
    campaignTokenSymbol: Optional[str] = None

    @property
    def precision(self) -> Optional[int]:
        return self.rewardToken.decimals

    @property
    def symbol(self) -> str:
        return self.rewardToken.symbol or self.campaignTokenSymbol or "Unknown"


class CampaignsPage(BaseModel):
    campaigns: list[Campaign]
    pageInfo: PageInfo
    totalCount: int = 0
