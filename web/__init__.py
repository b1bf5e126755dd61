"""
Web application package for the chess engine.

Provides a FastAPI-based REST API for requesting engine moves, evaluations
and captured-piece lists over HTTP.
"""
