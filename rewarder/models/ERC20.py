from typing import Optional

from pydantic import BaseModel


class Token(BaseModel):
    """
    Reward token as returned by the campaign directory.
    `decimals` can be missing for freshly indexed tokens, in which case it is read on chain.
    """

    id: str
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None


class TokenMetadata(BaseModel):
    """symbol and decimals read from the ERC20 contract itself"""

    symbol: str
    decimals: int
