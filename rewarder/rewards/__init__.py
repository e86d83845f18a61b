from rewarder.rewards.reconcile import *
