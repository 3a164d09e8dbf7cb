"""
Identity provider, bearer token resolution and authorization rules.
"""
