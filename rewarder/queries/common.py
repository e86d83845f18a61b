import logging
from copy import deepcopy
from typing import Any, Optional, TypedDict, TypeVar, cast

import requests
from web3 import Web3

from rewarder.env import RPC_URL, SUBGRAPHS
from rewarder.errors import EmptyQueryError, PaginationInconsistency, TooManyLoopsError
from rewarder.events import ErrorContext, EventRecorder, LoggingRecorder
from rewarder.models import GraphQL_Response, PageInfo

logger = logging.getLogger(__name__)

w3 = Web3(Web3.HTTPProvider(RPC_URL))


class GraphQLConfig(TypedDict, total=False):
    """
    Typechecker for JSON/Dict data to be sent to the rewards API
    :param `query`: the query to send
    :param `variables`: injected query params in dictionary format, `after` holds the cursor
    :param `operationName`: name of the operation in `query`
    """

    query: str
    variables: dict[str, Any]
    operationName: str


# python insantiates generics separate to function definition
T = TypeVar("T")


def extract_nested_graphql(res: GraphQL_Response, access_path: list[str]):
    """
    Walk through a dictionary until it finds the data you want.

    :param `access_path`: in the format ['first_key', 'nested_key_level0', 'nested_key_level1', ....]
    :param `res`: api response from graphql. First key should be 'data'
    """
    deepcopy_access_path = deepcopy(access_path)
    current = res["data"]
    while len(deepcopy_access_path) > 0:
        current = current[deepcopy_access_path.pop(0)]
    return current


def graphql_request(url: str, params: GraphQLConfig) -> GraphQL_Response:
    """Send one query, raising if the API reports errors or returns nothing"""
    response = requests.post(
        url, json=params, headers={"Accept": "application/json"}
    )
    response.raise_for_status()
    body: GraphQL_Response = response.json()

    if not body:
        raise EmptyQueryError(f"No results for graph query to {url}")
    if body.get("errors"):
        messages = ", ".join(e.get("message", "") for e in cast(list, body["errors"]))
        raise EmptyQueryError(f"Error in graph query to {url}: {messages}")
    if not body.get("data"):
        raise EmptyQueryError(f"No data in graph query to {url}")
    return body


def extract_page(
    res: GraphQL_Response, access_path: list[str]
) -> tuple[list[Any], PageInfo]:
    """Pull the nodes and page info out of a relay style connection"""
    connection = extract_nested_graphql(res, access_path)
    nodes = [edge["node"] for edge in connection["edges"]]
    return nodes, PageInfo.model_validate(connection["pageInfo"])


def graphql_iterate_cursor(
    url: str,
    access_path: list[str],
    params: GraphQLConfig,
    recorder: Optional[EventRecorder] = None,
    context: Optional[ErrorContext] = None,
    max_loops: int = 1000,
    max_pages: Optional[int] = None,
) -> list[T]:
    """
    Follow a cursor paginated connection until `hasNextPage` is false.

    Pages are fetched one after the other, each cursor comes from the previous response.
    If a page says there is more but gives no cursor, we record a `PaginationInconsistency`
    and return what we have rather than loop forever.

    :param `url`: the API endpoint
    :param `access_path`: eg ['claimProofs'] - keys leading to the connection
    :param `params`: query and variables, `variables.after` is overwritten with the cursor
    :param `max_pages`: stop early after this many pages
    """
    recorder = recorder or LoggingRecorder()
    params = deepcopy(params)
    params.setdefault("variables", {})

    all_results: list[T] = []
    loops = 0
    while True:
        if loops >= max_loops:
            raise TooManyLoopsError("graphql_iterate_cursor")
        if max_pages is not None and loops >= max_pages:
            break

        nodes, page_info = extract_page(graphql_request(url, params), access_path)
        all_results += nodes
        loops += 1

        if not page_info.hasNextPage:
            break
        if not page_info.endCursor:
            page_context = deepcopy(context) if context else ErrorContext()
            page_context.page = loops
            recorder.record(
                PaginationInconsistency(
                    "hasNextPage is true but no cursor provided, stopping pagination"
                ),
                page_context,
            )
            break
        params["variables"]["after"] = page_info.endCursor

    return all_results
