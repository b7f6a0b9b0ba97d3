"""
Username/password registration, login and bearer-token checks.
"""
