import os
from typing import Optional

from dotenv import load_dotenv
from rewarder.errors import MissingEnvironmentVariableException

load_dotenv()


def env_var(accessor: str, default: Optional[str] = None) -> str:
    """
    Attempt to fetch an environment variable and throw
    an error if not found and no default is given
    """
    var = os.environ.get(accessor, default)
    if not var:
        raise MissingEnvironmentVariableException(accessor)
    return var


class SUBGRAPHS:
    SMART_REWARDS = env_var(
        "SMART_REWARDS_GRAPHQL_URL",
        "https://s55qpiwei1.execute-api.us-east-1.amazonaws.com",
    )


RPC_URL = env_var("RPC_URL", "http://127.0.0.1:8545")
