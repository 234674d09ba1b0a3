"""Business logic services."""

from .analysis import Aggregator
from .assistant import ChatAssistant, ChatHistory
from .backends import MemoryStore, Store, TinyDBStore
from .classifier import Classifier, LLMClassifier
from .insights import HealthInsightService
from .orchestrator import CategorizationOrchestrator, OrchestrationResult, OverrideResult
from .report import ReportBuilder
from .request_builder import ClassificationRequestBuilder, ClassifierRequest
from .response_parser import ClassificationResponseParser
from .storage import EntryStore
from .tracking import TrackingService

__all__ = [
    "Aggregator",
    "CategorizationOrchestrator",
    "ChatAssistant",
    "ChatHistory",
    "ClassificationRequestBuilder",
    "ClassificationResponseParser",
    "Classifier",
    "ClassifierRequest",
    "EntryStore",
    "HealthInsightService",
    "LLMClassifier",
    "MemoryStore",
    "OrchestrationResult",
    "OverrideResult",
    "ReportBuilder",
    "Store",
    "TinyDBStore",
    "TrackingService",
]
