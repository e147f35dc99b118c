"""
BeatCheck Ingestion Module
==========================

HTML to text rendering for feed entries and article pages.
"""
