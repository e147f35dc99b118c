"""
BeatCheck Configuration
=======================
"""
