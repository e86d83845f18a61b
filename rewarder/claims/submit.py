"""
Submit claims to the SmartRewarder contract.

Signing, nonces and fees are left to the `Web3` instance handed in: the `sender`
must be an account the provider (or a signing middleware) can transact from.
Nothing here retries. A failed or reverted claim is raised to the caller.
"""

import logging
from enum import Enum
from typing import Any, Optional

import eth_utils as eth
from web3 import Web3
from web3.contract import Contract
from web3.logs import DISCARD

from rewarder.errors import MissingRewarderAddressError, SubmissionError
from rewarder.models import (
    ClaimArguments,
    ClaimEvent,
    ClaimTransactionResult,
    EthereumAddress,
)

logger = logging.getLogger(__name__)

SMART_REWARDER_ABI = [
    {
        "inputs": [
            {"internalType": "address[]", "name": "users", "type": "address[]"},
            {"internalType": "uint256[]", "name": "campaignIds", "type": "uint256[]"},
            {"internalType": "uint256[]", "name": "amounts", "type": "uint256[]"},
            {"internalType": "bytes32[][]", "name": "proofs", "type": "bytes32[][]"},
        ],
        "name": "claim",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "user", "type": "address"},
            {"indexed": True, "internalType": "uint256", "name": "campaignId", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "amount", "type": "uint256"},
        ],
        "name": "Claimed",
        "type": "event",
    },
]

# estimates are padded by 20%
GAS_BUFFER_PERCENT = 120


class RevertReason(str, Enum):
    INVALID_PROOF = "InvalidProof"
    ALREADY_CLAIMED = "AlreadyClaimed"
    CAMPAIGN_CLOSED = "CampaignClosed"
    UNAUTHORIZED = "Unauthorized"
    TRANSACTION_FAILED = "TransactionFailed"
    UNKNOWN = "Unknown"


# substrings of the node's error message, checked in order
REVERT_PATTERNS: list[tuple[RevertReason, tuple[str, ...]]] = [
    (RevertReason.INVALID_PROOF, ("InvalidProof", "MerkleProofInvalid")),
    (RevertReason.ALREADY_CLAIMED, ("AlreadyClaimed",)),
    (RevertReason.CAMPAIGN_CLOSED, ("CampaignClosed", "ClaimWindowEnded")),
    (RevertReason.UNAUTHORIZED, ("Unauthorized",)),
]


def classify_revert(message: str) -> RevertReason:
    for reason, patterns in REVERT_PATTERNS:
        if any(p in message for p in patterns):
            return reason
    return RevertReason.UNKNOWN


def get_rewarder_contract(
    w3: Web3, rewarders: dict[int, EthereumAddress], chain_id: int
) -> Contract:
    address = rewarders.get(chain_id)
    if not address:
        raise MissingRewarderAddressError(
            f"No SmartRewarder contract configured for chain {chain_id}",
            chain_id=chain_id,
        )
    return w3.eth.contract(
        address=eth.to_checksum_address(address), abi=SMART_REWARDER_ABI
    )


def _hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return eth.to_hex(value)
    return str(value)


def parse_claim_events(contract: Contract, receipt: Any) -> list[ClaimEvent]:
    """Decode the `Claimed` logs in a receipt, skipping logs from other contracts"""
    logs = contract.events.Claimed().process_receipt(receipt, errors=DISCARD)
    return [
        ClaimEvent(
            user=log["args"]["user"],
            campaignId=int(log["args"]["campaignId"]),
            amount=str(log["args"]["amount"]),
        )
        for log in logs
    ]


def estimate_claim_gas(
    contract: Contract, args: ClaimArguments, sender: EthereumAddress
) -> int:
    try:
        estimate = contract.functions.claim(*args.to_call()).estimate_gas(
            {"from": eth.to_checksum_address(sender)}
        )
    except Exception as e:
        raise SubmissionError(
            f"Failed to estimate gas: {e}", revert_reason=classify_revert(str(e))
        ) from e
    return estimate * GAS_BUFFER_PERCENT // 100


def submit_claim(
    w3: Web3,
    contract: Contract,
    args: ClaimArguments,
    sender: EthereumAddress,
    gas: Optional[int] = None,
) -> ClaimTransactionResult:
    """
    Send one claim transaction and block until it is mined.
    Every single and batch claim goes through here.
    """
    tx_params: dict[str, Any] = {"from": eth.to_checksum_address(sender)}
    if gas is not None:
        tx_params["gas"] = gas

    try:
        tx_hash = contract.functions.claim(*args.to_call()).transact(tx_params)
        logger.info("Claim submitted: %s", _hex(tx_hash))
        receipt = w3.eth.wait_for_transaction_receipt(tx_hash)
    except Exception as e:
        reason = classify_revert(str(e))
        raise SubmissionError(
            f"Claim transaction failed: {e}", revert_reason=reason
        ) from e

    tx_hash_hex = _hex(receipt["transactionHash"])
    if receipt["status"] != 1:
        raise SubmissionError(
            f"Transaction failed with status {receipt['status']}",
            revert_reason=RevertReason.TRANSACTION_FAILED,
            transaction_hash=tx_hash_hex,
        )

    return ClaimTransactionResult(
        transactionHash=tx_hash_hex,
        blockNumber=receipt["blockNumber"],
        gasUsed=str(receipt["gasUsed"]),
        effectiveGasPrice=str(receipt.get("effectiveGasPrice", 0)),
        status=receipt["status"],
        events=parse_claim_events(contract, receipt),
    )
