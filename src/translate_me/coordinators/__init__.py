"""Coordinators - Orchestration layer connecting presentation with services."""

from .translation_history_coordinator import RequestState, TranslationHistoryCoordinator

__all__ = [
    "TranslationHistoryCoordinator",
    "RequestState",
]
