"""
Service layer components for reporting.
"""

from .report_generator import ReportGenerator, REPORT_START, REPORT_END

__all__ = [
    'ReportGenerator',
    'REPORT_START',
    'REPORT_END'
]
