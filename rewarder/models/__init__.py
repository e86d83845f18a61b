"""
Types here are instantiated as subclasses of pydantic's `BaseModel`.
Wire data from the rewards API is validated on the way in just by declaring the fields,
and every model serializes back to json with `.model_dump()`.

Amounts are always strings: decimal strings as the API returns them,
or base unit strings (`BigNumber`) once converted. Never floats.
"""

from rewarder.models.types import *
from rewarder.models.ERC20 import *
from rewarder.models.Campaign import *
from rewarder.models.Claim import *
from rewarder.models.Reconciliation import *
from rewarder.models.Config import *
from rewarder.models.Writer import *
