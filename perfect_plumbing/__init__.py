"""
Perfect Plumbing Ops Package

Service layer for a plumbing contractor's day-to-day operations:
- Customer directory
- Job scheduling and the job status lifecycle
- Quote and invoice generation
- Payment recording
- Dashboard statistics and calendar views
"""

__version__ = "1.0.0"
__author__ = "Perfect Plumbing Team"
