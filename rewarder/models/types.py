from typing import Literal, Any

# type aliases for clarity
EthereumAddress = str
BigNumber = str
Bytes32 = str
GraphQL_Response = dict[Literal["data", "errors"], Any]
