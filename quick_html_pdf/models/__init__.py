"""
Data Models
===========

Pydantic models for PDF options, page geometry, and API requests/responses.
"""
