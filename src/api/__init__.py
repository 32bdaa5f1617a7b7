"""
HTTP API for Flowline Core
"""
