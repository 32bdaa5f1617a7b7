"""
Flowline Core - workflow execution engine for a low-code automation platform
"""
__version__ = "0.1.0"
