from typing import Any, Optional

from pydantic import TypeAdapter

from rewarder.events import ErrorContext, EventRecorder
from rewarder.models import EthereumAddress, HistoricalClaim
from rewarder.queries.common import SUBGRAPHS, graphql_iterate_cursor

"""
Historical claims are indexed per pool, not per campaign.
We fetch everything the user claimed from the pool and filter by campaign later,
which also lets us show totals across campaigns.
"""

CLAIM_REWARDS_QUERY = """
query ClaimRewards($pool: String!, $chainId: Int!, $filter: ClaimRewardFilter, $after: String) {
  claimRewards(poolId: $pool, chainId: $chainId, filter: $filter, after: $after) {
    edges {
      cursor
      node {
        id
        user
        amount
        campaign
        chainId
        timestamp
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
    totalCount
  }
}
"""


def fetch_historical_claims(
    pool: EthereumAddress,
    chain_id: int,
    user: EthereumAddress,
    url: str = SUBGRAPHS.SMART_REWARDS,
    recorder: Optional[EventRecorder] = None,
) -> list[HistoricalClaim]:
    variables = {
        "pool": pool.lower(),
        "chainId": chain_id,
        "filter": {"user": user},
        "after": None,
    }
    claims: list[Any] = graphql_iterate_cursor(
        url,
        ["claimRewards"],
        dict(query=CLAIM_REWARDS_QUERY, variables=variables, operationName="ClaimRewards"),
        recorder=recorder,
        context=ErrorContext(
            operation="fetch_historical_claims", chain_id=chain_id, user=user
        ),
    )
    return TypeAdapter(list[HistoricalClaim]).validate_python(claims)
