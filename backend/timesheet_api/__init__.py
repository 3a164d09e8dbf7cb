"""
Backend for the multi-tenant timesheet service.
"""
