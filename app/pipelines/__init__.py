"""
Check-in Pipelines.

Business logic orchestration functions.
"""
