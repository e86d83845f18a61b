from rewarder.queries.common import *
from rewarder.queries.campaigns import *
from rewarder.queries.eligibility import *
from rewarder.queries.historical import *
from rewarder.queries.tokens import *
