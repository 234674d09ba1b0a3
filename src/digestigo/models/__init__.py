"""Data models for digestive health tracking."""

from .chat import ChatMessage
from .summary import DietaryBreakdown, SummaryItem, TrackingSummary
from .tracking import Categorization, Category, FoodCategory, NewEntry, TrackingEntry

__all__ = [
    "Category",
    "FoodCategory",
    "Categorization",
    "NewEntry",
    "TrackingEntry",
    "TrackingSummary",
    "SummaryItem",
    "DietaryBreakdown",
    "ChatMessage",
]
