"""
Utility modules for the ClinicOS scheduling backend.

This package contains shared helpers used across the application: datetime
handling for naive local appointment times and the national holiday calendar.
"""
