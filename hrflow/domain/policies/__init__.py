"""This module decides who may view, decide, and fulfil requests."""
from .actor import Actor, Role, PermissionModule, PermissionLevel, permission
from .policy import AuthorizationPolicy, DecisionRule, AdvanceRule
from .policy_decision import PolicyOutcome, PolicyDecision
from .default_policy import build_default_policy
