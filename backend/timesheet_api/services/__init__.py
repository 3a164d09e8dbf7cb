"""
Domain logic shared by the route handlers.
"""
