"""
Top-level import root for the marketplace pricing engine, its HTTP API, and shared process helpers.
"""
