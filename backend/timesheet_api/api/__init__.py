"""
HTTP layer of the timesheet service.
"""
import os

API_PREFIX = os.getenv("API_PREFIX", "/api/v1").rstrip("/")
