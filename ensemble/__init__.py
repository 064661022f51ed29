"""
Ensemble Lighting Designer

Rule-based lighting layouts for detected rooms, with metrics, cost and
chat-driven edits.
"""

from ensemble.catalog import DEFAULT_CATALOG, FixtureCatalog, FixtureSpec
from ensemble.chat import ChatResult, explain_design, respond
from ensemble.intent import Intent, classify_intent
from ensemble.metrics import compute_cost, compute_metrics, cost_breakdown
from ensemble.mutation import DesignDelta, apply_delta, mutate, plan_delta
from ensemble.schema import Design, Fixture, Metrics, ReasoningEntry, Room
from ensemble.service import LightingDesignService, ServiceResponse
from ensemble.session import Session, SessionStore
from ensemble.synthesis import synthesize

__all__ = [
    "DEFAULT_CATALOG",
    "FixtureCatalog",
    "FixtureSpec",
    "ChatResult",
    "explain_design",
    "respond",
    "Intent",
    "classify_intent",
    "compute_cost",
    "compute_metrics",
    "cost_breakdown",
    "DesignDelta",
    "apply_delta",
    "mutate",
    "plan_delta",
    "Design",
    "Fixture",
    "Metrics",
    "ReasoningEntry",
    "Room",
    "LightingDesignService",
    "ServiceResponse",
    "Session",
    "SessionStore",
    "synthesize",
]
