from rewarder.claims.arguments import *
from rewarder.claims.submit import *
