import json

from rewarder.models import Config


def load_conf(path: str) -> Config:
    """Loads a run config from a json file"""
    with open(path) as j:
        return Config.model_validate(json.load(j))
