"""
Interactive Session

Debounced input handling that drives a SearchEngine on behalf of a
presentation layer.
"""

from .debounce import Debouncer
from .controller import ResultsView, SearchSessionController

__all__ = [
    "Debouncer",
    "ResultsView",
    "SearchSessionController",
]
