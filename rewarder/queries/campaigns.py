from typing import Any, Optional

from pydantic import TypeAdapter

from rewarder.errors import BadConfigException
from rewarder.events import ErrorContext, EventRecorder
from rewarder.models import Campaign, CampaignsPage
from rewarder.queries.common import (
    SUBGRAPHS,
    extract_nested_graphql,
    extract_page,
    graphql_iterate_cursor,
    graphql_request,
)

CAMPAIGNS_QUERY = """
query CampaignsQuery($first: Int, $after: String, $filter: CampaignFilter) {
  campaigns(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        chainId
        campaignId
        name
        campaignType
        protocol
        liquidityPool
        rewardToken { id name symbol decimals }
        paused
        closed
        startBlock
        endBlock
        distributionAmount
        campaignStartTimestamp
        campaignEndTimestamp
      }
    }
    pageInfo { endCursor hasNextPage }
    totalCount
  }
}
"""


def _validate_page_size(page_size: int) -> None:
    if page_size <= 0 or page_size > 1000:
        raise BadConfigException("Page size must be between 1 and 1000")


def _campaigns_params(chain_id: int, page_size: int, cursor: Optional[str]) -> dict[str, Any]:
    return dict(
        query=CAMPAIGNS_QUERY,
        variables={"first": page_size, "after": cursor, "filter": {"chainId": chain_id}},
        operationName="CampaignsQuery",
    )


def fetch_campaigns_page(
    chain_id: int,
    page_size: int = 50,
    cursor: Optional[str] = None,
    url: str = SUBGRAPHS.SMART_REWARDS,
) -> CampaignsPage:
    """Fetch a single page of the campaign directory, for callers driving pagination themselves"""
    _validate_page_size(page_size)
    res = graphql_request(url, _campaigns_params(chain_id, page_size, cursor))
    nodes, page_info = extract_page(res, ["campaigns"])
    return CampaignsPage(
        campaigns=TypeAdapter(list[Campaign]).validate_python(nodes),
        pageInfo=page_info,
        totalCount=extract_nested_graphql(res, ["campaigns"]).get("totalCount", 0),
    )


def fetch_all_campaigns(
    chain_id: int,
    page_size: int = 50,
    max_pages: Optional[int] = None,
    url: str = SUBGRAPHS.SMART_REWARDS,
    recorder: Optional[EventRecorder] = None,
) -> list[Campaign]:
    """Walk every page of the campaign directory for a chain"""
    if chain_id <= 0:
        raise BadConfigException("Invalid chainId provided")
    _validate_page_size(page_size)

    campaigns: list[Any] = graphql_iterate_cursor(
        url,
        ["campaigns"],
        _campaigns_params(chain_id, page_size, None),
        recorder=recorder,
        context=ErrorContext(operation="fetch_all_campaigns", chain_id=chain_id),
        max_pages=max_pages,
    )
    return TypeAdapter(list[Campaign]).validate_python(campaigns)
