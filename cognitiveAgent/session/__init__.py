"""Session records and primitives.

The orchestrator lives in :mod:`cognitiveAgent.session.orchestrator`; it is not
re-exported here because the graph and tool layers import these primitives.
"""

from .archive import InMemoryTurnArchive, SqliteTurnArchive, TurnArchive
from .cancellation import CancellationToken
from .ledger import ConversationLedger
from .notifier import NotificationBus, Subscription
from .review import PlanReviewGate, describe_step
from .schema import (
    Attachment,
    Citation,
    CognitiveContextVector,
    ConversationTurn,
    ImageDescriptor,
    PlanStep,
    ProcessState,
    SessionSnapshot,
    StepStatus,
    ToolKind,
    TurnState,
)

__all__ = [
    "InMemoryTurnArchive",
    "SqliteTurnArchive",
    "TurnArchive",
    "CancellationToken",
    "ConversationLedger",
    "NotificationBus",
    "Subscription",
    "PlanReviewGate",
    "describe_step",
    "Attachment",
    "Citation",
    "CognitiveContextVector",
    "ConversationTurn",
    "ImageDescriptor",
    "PlanStep",
    "ProcessState",
    "SessionSnapshot",
    "StepStatus",
    "ToolKind",
    "TurnState",
]
