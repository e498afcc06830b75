"""Plan tree model, actions and resolution."""

from .actions import CallAction, CommandAction, SourceAction
from .models import ExecutablePlan, ParentPlan, Plan
from .tree import PlanTree, Resolution, resolve

__all__ = [
    "CallAction",
    "CommandAction",
    "ExecutablePlan",
    "ParentPlan",
    "Plan",
    "PlanTree",
    "Resolution",
    "SourceAction",
    "resolve",
]
