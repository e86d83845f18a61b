from rewarder.errors import ArgumentAssemblyError, ConversionError
from rewarder.models import ClaimArguments, EligibilityRecord
from rewarder.units import to_base_units, validate_amounts_for_on_chain


def to_base_unit_records(
    records: list[EligibilityRecord], precision: int
) -> list[EligibilityRecord]:
    """
    Copy the records with their decimal amounts converted to base units.
    The contract expects raw uint256 amounts, so do this before building arguments.
    """
    converted = []
    for r in records:
        try:
            amount = to_base_units(r.amount, precision)
        except ConversionError as e:
            raise ConversionError(
                str(e), user=r.user, campaign_id=r.campaignId, chain_id=r.chainId
            ) from e
        converted.append(r.model_copy(update={"amount": amount}))
    return converted


def build_claim_arguments(records: list[EligibilityRecord]) -> ClaimArguments:
    """
    Assemble the parallel arrays for one `claim` call, preserving input order.

    Only structural checks are made here (a user and a non empty proof per record)
    so lower level callers that already trust their records can use this directly.
    Amounts are taken as is and must already be in base units.

    Raises `ArgumentAssemblyError` before anything is sent if the payload is unsafe.
    """
    if len(records) == 0:
        raise ArgumentAssemblyError("No proofs provided for claim")

    accounts: list[str] = []
    campaign_ids: list[int] = []
    amounts: list[str] = []
    proofs: list[list[str]] = []

    for record in records:
        if not record.user or len(record.proofElements) == 0:
            raise ArgumentAssemblyError(
                f"Invalid proof structure for campaign {record.campaignId}",
                user=record.user,
                campaign_id=record.campaignId,
                chain_id=record.chainId,
            )
        accounts.append(record.user)
        campaign_ids.append(record.campaignId)
        amounts.append(record.amount)
        proofs.append(list(record.proofElements))

    if not (len(accounts) == len(campaign_ids) == len(amounts) == len(proofs) == len(records)):
        raise ArgumentAssemblyError("Inconsistent array lengths in claim arguments")

    if not validate_amounts_for_on_chain(amounts):
        raise ArgumentAssemblyError(
            "One or more amounts exceed safe limits for on-chain use"
        )

    return ClaimArguments(
        accounts=accounts,
        campaignIds=campaign_ids,
        amounts=amounts,
        proofSequences=proofs,
    )
