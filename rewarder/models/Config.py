from typing import Optional

import eth_utils as eth
from pydantic import BaseModel, field_validator, model_validator

from rewarder.errors import BadConfigException
from rewarder.models.types import EthereumAddress


class Config(BaseModel):
    """
    Run configuration, loaded from a json file
    :param `user`: the address whose rewards we reconcile
    :param `chain_id`: chain the campaigns live on
    :param `campaign_ids`: campaigns to reconcile, in order
    :param `execute`: submit a claim for every claimable campaign
    :param `rewarders`: SmartRewarder contract address per chain id
    :param `sender`: account the claim transaction is sent from, must be unlocked on the provider
    :param `page_size`: page size used when walking the campaign directory
    """

    user: EthereumAddress
    chain_id: int
    campaign_ids: list[int]
    execute: bool = False
    rewarders: dict[int, EthereumAddress] = {}
    sender: Optional[EthereumAddress] = None
    page_size: int = 50

    @field_validator("user")
    @classmethod
    def validate_user(cls, user: str) -> str:
        if not eth.is_hex_address(user):
            raise BadConfigException(f"User is not a valid address: {user}")
        return user

    @field_validator("chain_id")
    @classmethod
    def validate_chain_id(cls, chain_id: int) -> int:
        if chain_id <= 0:
            raise BadConfigException("Chain id must be positive")
        return chain_id

    @field_validator("campaign_ids")
    @classmethod
    def validate_campaign_ids(cls, campaign_ids: list[int]) -> list[int]:
        if len(campaign_ids) == 0:
            raise BadConfigException("No campaigns passed")
        if any(c <= 0 for c in campaign_ids):
            raise BadConfigException("Campaign ids must be positive")
        if len(set(campaign_ids)) != len(campaign_ids):
            raise BadConfigException("Passed Duplicate Campaign Ids")
        return campaign_ids

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, page_size: int) -> int:
        if page_size <= 0 or page_size > 1000:
            raise BadConfigException("Page size must be between 1 and 1000")
        return page_size

    @model_validator(mode="after")
    def ensure_claim_settings(self) -> "Config":
        if not self.execute:
            return self
        if not self.sender:
            raise BadConfigException("Must provide a sender to execute claims")
        if self.chain_id not in self.rewarders:
            raise BadConfigException(
                f"Must provide a rewarder address for chain {self.chain_id} to execute claims"
            )
        return self

    @property
    def report_name(self) -> str:
        return f"{self.chain_id}-{self.user.lower()}"
