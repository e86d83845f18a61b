import pytest

from rewarder.errors import BadConfigException
from rewarder.models import Config
from rewarder.test.conftest import REWARDER, USER


def make_conf(**kwargs) -> dict:
    return dict(user=USER, chain_id=1, campaign_ids=[1, 2]) | kwargs


def test_load_conf(config: Config):
    assert config.user == USER
    assert config.campaign_ids == [1, 2]
    # json object keys arrive as strings
    assert config.rewarders == {1: REWARDER}
    assert config.report_name == f"1-{USER.lower()}"


def test_defaults():
    config = Config.model_validate(make_conf())
    assert config.execute is False
    assert config.rewarders == {}
    assert config.sender is None
    assert config.page_size == 50


@pytest.mark.parametrize(
    "overrides, message",
    [
        (dict(user="0x123"), "User is not a valid address"),
        (dict(chain_id=0), "Chain id must be positive"),
        (dict(campaign_ids=[]), "No campaigns passed"),
        (dict(campaign_ids=[1, -2]), "Campaign ids must be positive"),
        (dict(campaign_ids=[1, 2, 1]), "Passed Duplicate Campaign Ids"),
        (dict(page_size=0), "Page size must be between 1 and 1000"),
        (dict(page_size=1001), "Page size must be between 1 and 1000"),
        (dict(execute=True, rewarders={1: REWARDER}), "Must provide a sender"),
        (
            dict(execute=True, sender=USER, rewarders={10: REWARDER}),
            "Must provide a rewarder address for chain 1",
        ),
    ],
)
def test_bad_config(overrides, message):
    with pytest.raises(BadConfigException, match=message):
        Config.model_validate(make_conf(**overrides))


def test_execute_config():
    config = Config.model_validate(
        make_conf(execute=True, sender=USER, rewarders={1: REWARDER})
    )
    assert config.execute
