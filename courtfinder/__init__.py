"""Nearby sports court search across a curated dataset and live place providers."""
from courtfinder.orchestrator import SearchOrchestrator, SearchState, build_default_orchestrator

__version__ = "0.1.0"

__all__ = ["SearchOrchestrator", "SearchState", "build_default_orchestrator"]
