"""
Core business logic for plumbing operations.

This module contains:
- The job status lifecycle
- Quote and invoice generation
- Payment recording
- Customer directory and job scheduling
- Dashboard statistics and the month calendar
"""

from .job_lifecycle import JobLifecycleController, VALID_TRANSITIONS, next_status, can_transition
from .documents import DocumentGenerator, APPRENTICE_DISCLAIMER
from .payments import PaymentRecorder, PaymentOutcome
from .customers import CustomerDirectory
from .scheduling import JobScheduler
from .dashboard import Dashboard, DashboardStats
from .calendar_view import CalendarDay, build_month

__all__ = [
    'JobLifecycleController',
    'VALID_TRANSITIONS',
    'next_status',
    'can_transition',
    'DocumentGenerator',
    'APPRENTICE_DISCLAIMER',
    'PaymentRecorder',
    'PaymentOutcome',
    'CustomerDirectory',
    'JobScheduler',
    'Dashboard',
    'DashboardStats',
    'CalendarDay',
    'build_month',
]
