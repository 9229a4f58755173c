"""
Data Transfer Objects (DTOs) Layer

Structure:
- internal/: job description and result passed between the pipeline and its callers
- response/: DTOs for outgoing API responses
"""
