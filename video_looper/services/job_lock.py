"""
Job Lock

Single-flight guard for the HTTP front end. Loop jobs share the output
directory and are CPU/disk heavy, so only one runs at a time per process.

Usage:
  from video_looper.services.job_lock import job_lock
  async with job_lock:
      ...
"""

import asyncio

# Single-flight loop job execution across the process
job_lock = asyncio.Semaphore(1)

# Set during shutdown so no new jobs are started
shutting_down = asyncio.Event()


def set_shutting_down():
  """Mark the application as shutting down to refuse new jobs."""
  shutting_down.set()
