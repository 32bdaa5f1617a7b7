"""
Command line interface for Flowline Core
"""
