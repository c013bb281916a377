"""
Presentation layer: HTTP routes and use case handlers that can also run as CLI scripts.
"""
