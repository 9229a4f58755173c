"""
Services for validating, running and cleaning up loop jobs.
"""
