# propdesk/__init__.py
"""
Propdesk - Funding evaluation tracking for prop-firm challenge accounts.

Provides the evaluation engine (trade ledger, phase pass/advance state
machine and daily risk guard) plus read-only reporting and workspace
persistence helpers.
"""

from .config import AccountConfig, EngineConfig
from .engine import EvaluationEngine, TradeResult
from .errors import NoActiveAccount, PropDeskError, TradeNotFound, ValidationError
from .events import EventDispatcher, PhaseAdvancedEvent, PhasePassedEvent
from .guard import RiskStatus
from .journal import WorkspaceJournal, WorkspaceSnapshot
from .models import Account, RiskLimits, StepConfig, StepTargets, Trade, TradeDraft
from .sizing import PairType, SizingResult, lot_size
from .types import AlertSeverity, ChallengeType, TradeOutcome

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Account",
    "AccountConfig",
    "AlertSeverity",
    "ChallengeType",
    "EngineConfig",
    "EvaluationEngine",
    "EventDispatcher",
    "PairType",
    "NoActiveAccount",
    "PhaseAdvancedEvent",
    "PhasePassedEvent",
    "PropDeskError",
    "RiskLimits",
    "RiskStatus",
    "SizingResult",
    "StepConfig",
    "StepTargets",
    "Trade",
    "TradeDraft",
    "TradeNotFound",
    "TradeOutcome",
    "TradeResult",
    "ValidationError",
    "WorkspaceJournal",
    "WorkspaceSnapshot",
    "lot_size",
]
