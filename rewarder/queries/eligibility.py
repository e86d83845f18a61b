from typing import Any, Optional

from pydantic import TypeAdapter

from rewarder.events import ErrorContext, EventRecorder
from rewarder.models import EligibilityRecord, EthereumAddress
from rewarder.queries.common import SUBGRAPHS, graphql_iterate_cursor

CLAIM_PROOFS_QUERY = """
query ClaimProofEdges($user: String!, $filter: ClaimProofFilter, $after: String) {
  claimProofs(user: $user, filter: $filter, after: $after) {
    totalCount
    edges {
      node {
        chainId
        lastBlockUpdatedTo
        user
        campaignId
        amount
        proof
      }
      cursor
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""


def fetch_eligibility_records(
    user: EthereumAddress,
    chain_id: int,
    campaign_id: int,
    url: str = SUBGRAPHS.SMART_REWARDS,
    recorder: Optional[EventRecorder] = None,
) -> list[EligibilityRecord]:
    """
    Fetch every claim proof for (user, chain, campaign).
    The result is not validated, see `rewarder.validation`.
    """
    variables = {
        "user": user,
        "filter": {"chainId": chain_id, "campaignId": campaign_id},
        "after": None,
    }
    proofs: list[Any] = graphql_iterate_cursor(
        url,
        ["claimProofs"],
        dict(query=CLAIM_PROOFS_QUERY, variables=variables, operationName="ClaimProofEdges"),
        recorder=recorder,
        context=ErrorContext(
            operation="fetch_eligibility_records",
            chain_id=chain_id,
            campaign_id=campaign_id,
            user=user,
        ),
    )
    return TypeAdapter(list[EligibilityRecord]).validate_python(proofs)
