"""
Database engine, key-value store and entity repositories.
"""
