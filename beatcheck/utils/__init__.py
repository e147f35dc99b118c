"""
BeatCheck Utilities
===================

Logging setup and the exception hierarchy shared by all components.
"""
