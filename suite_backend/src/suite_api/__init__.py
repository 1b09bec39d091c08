"""
Productivity suite backend.

Import the ASGI application from `suite_api.main`.
"""
