import logging
from typing import Optional

import eth_utils as eth
from multicall import Call, Multicall  # type: ignore
from tinydb import TinyDB, where
from tinydb.storages import MemoryStorage
from web3 import Web3

from rewarder.models import Campaign, EthereumAddress, TokenMetadata
from rewarder.queries.common import w3

logger = logging.getLogger(__name__)

FALLBACK_SYMBOL = "UNKNOWN"
FALLBACK_DECIMALS = 18


def token_cache() -> TinyDB:
    """
    In memory key value store for token metadata, keyed by `chainId:address`.
    Lives as long as the client that owns it; nothing is written to disk.
    """
    return TinyDB(storage=MemoryStorage)


def _cache_key(token: EthereumAddress, chain_id: int) -> str:
    return f"{chain_id}:{token.lower()}"


def get_token_metadata(
    token: EthereumAddress,
    chain_id: int,
    cache: Optional[TinyDB] = None,
    _w3: Web3 = w3,
) -> TokenMetadata:
    """
    Read symbol and decimals from the ERC20 contract.
    Both calls go out together in one multicall since neither depends on the other.
    A call that fails falls back to `UNKNOWN` / 18 with a warning. If the whole read fails
    the fallback is returned but not cached, so the next lookup tries again.
    """
    key = _cache_key(token, chain_id)
    if cache is not None:
        hit = cache.get(where("key") == key)
        if hit:
            return TokenMetadata(symbol=hit["symbol"], decimals=hit["decimals"])

    address = eth.to_checksum_address(token)
    calls = [
        Call(address, ["symbol()(string)"], [["symbol", None]]),
        Call(address, ["decimals()(uint8)"], [["decimals", None]]),
    ]
    try:
        result = Multicall(calls, _w3=_w3, require_success=False)()
    except Exception as e:
        # node unreachable, no multicall contract on the chain...
        logger.warning("Failed to read metadata for %s on chain %s: %s", token, chain_id, e)
        return TokenMetadata(symbol=FALLBACK_SYMBOL, decimals=FALLBACK_DECIMALS)

    symbol = result.get("symbol")
    if symbol is None:
        logger.warning("Failed to fetch symbol for %s, using fallback", token)
        symbol = FALLBACK_SYMBOL

    decimals = result.get("decimals")
    if decimals is None:
        logger.warning("Failed to fetch decimals for %s, using fallback", token)
        decimals = FALLBACK_DECIMALS

    metadata = TokenMetadata(symbol=symbol, decimals=decimals)
    if cache is not None:
        cache.upsert({"key": key, **metadata.model_dump()}, where("key") == key)
    return metadata


def enrich_campaign(
    campaign: Campaign, cache: Optional[TinyDB] = None, _w3: Web3 = w3
) -> Campaign:
    """
    Fill in reward token precision (if the directory left it out) and the token symbol.
    Returns a new campaign, the input is left untouched.
    """
    metadata = get_token_metadata(
        campaign.rewardToken.id, campaign.chainId, cache=cache, _w3=_w3
    )
    token = campaign.rewardToken.model_copy(
        update={
            "decimals": campaign.rewardToken.decimals
            if campaign.rewardToken.decimals is not None
            else metadata.decimals,
            "symbol": campaign.rewardToken.symbol or metadata.symbol,
        }
    )
    return campaign.model_copy(
        update={"rewardToken": token, "campaignTokenSymbol": metadata.symbol}
    )
