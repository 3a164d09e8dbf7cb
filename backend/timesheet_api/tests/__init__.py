"""
Test package for the timesheet backend.

This package contains test suites for:
- The key-value store and repositories
- Sign-up, sign-in and invite codes
- Organization isolation and role checks
- Projects, timesheets and photos
- Reporting and CSV export
"""
