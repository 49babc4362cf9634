"""
Result models and the per-run results table.
"""

from .models import FETCH_FAILED, SUCCESS_CODE, FetchOutcome, ResultEntry, is_redirect
from .repository import ResultRepository

__all__ = [
    'FETCH_FAILED',
    'SUCCESS_CODE',
    'FetchOutcome',
    'ResultEntry',
    'is_redirect',
    'ResultRepository'
]
