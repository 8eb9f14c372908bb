"""Mutation engine for session and plan documents."""

from knowsys.mutation.engine import MutationEngine
from knowsys.mutation.plan import create_plan, update_plan
from knowsys.mutation.request import CanonicalUpdate, Placement, UpdateRequest, normalize
from knowsys.mutation.session import create_session, update_session

__all__ = [
    "MutationEngine",
    "CanonicalUpdate",
    "Placement",
    "UpdateRequest",
    "normalize",
    "create_plan",
    "create_session",
    "update_plan",
    "update_session",
]
