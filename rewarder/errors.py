from typing import Optional


class SmartRewardsError(Exception):
    """
    Base error for anything touching a user's rewards.
    Carries the context it was raised in so callers can report it.
    """

    def __init__(
        self,
        message: str,
        user: Optional[str] = None,
        campaign_id: Optional[int] = None,
        chain_id: Optional[int] = None,
    ):
        super().__init__(message)
        self.user = user
        self.campaign_id = campaign_id
        self.chain_id = chain_id


class ConversionError(SmartRewardsError):
    """Raise if a decimal or base unit amount is malformed, or the precision is out of range"""

    pass


class ValidationError(SmartRewardsError):
    """Raise if a record fails its expected user / campaign integrity check"""

    pass


class ArgumentAssemblyError(SmartRewardsError):
    """Raise if claim arguments are inconsistent or unsafe to send on chain"""

    pass


class CampaignNotFoundError(SmartRewardsError):
    pass


class PaginationInconsistency(SmartRewardsError):
    """
    A page reported more results but gave no cursor to fetch them.
    Recorded and logged, never raised by the paginator.
    """

    pass


class MissingRewarderAddressError(SmartRewardsError):
    pass


class SubmissionError(SmartRewardsError):
    """
    Raise if a claim transaction fails or reverts.
    :param `revert_reason`: the classified revert, see `RevertReason`
    :param `transaction_hash`: set when the transaction was mined but failed
    """

    def __init__(
        self,
        message: str,
        revert_reason: Optional[str] = None,
        transaction_hash: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.revert_reason = revert_reason
        self.transaction_hash = transaction_hash


class EmptyQueryError(Exception):
    """Raise if GraphQL Query returns no results"""

    pass


class TooManyLoopsError(Exception):
    """Raise if a loop runs too many times"""

    pass


class BadConfigException(Exception):
    pass


class MissingEnvironmentVariableException(Exception):
    pass
