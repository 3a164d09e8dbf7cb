"""
Object storage for timesheet photos.
"""
