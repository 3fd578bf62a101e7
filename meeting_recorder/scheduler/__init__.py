"""
Job scheduling.
"""

from .job_scheduler import JobScheduler, AddJobResult, Job

__all__ = ["JobScheduler", "AddJobResult", "Job"]
