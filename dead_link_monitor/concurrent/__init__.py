"""
Cooperative link checking pipeline.

This package provides the producer/consumer pipeline that runs on a single
asyncio event loop:
- Job and ConnectionBudget models
- JobQueue with its open/closed lifecycle
- RecurringTick scheduling of the polling components

Main components (import from their modules):
- feeder.FileFeeder: turns input documents into jobs
- dispatcher.FetchDispatcher: bounded-concurrency fetching and completion detection
- controller.LinkCheckController: wires one run together
"""

from .models import (
    Job,
    JobStatus,
    ConnectionBudget,
    RunStats,
    is_absolute_url
)
from .job_queue import JobQueue
from .scheduler import RecurringTick

__all__ = [
    'Job',
    'JobStatus',
    'ConnectionBudget',
    'RunStats',
    'is_absolute_url',
    'JobQueue',
    'RecurringTick'
]
