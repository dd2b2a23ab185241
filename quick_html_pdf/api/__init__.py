"""
API Module
==========

FastAPI application exposing template to PDF rendering over HTTP.

Components:
- main: Application factory, lifespan and exception handlers
- routes: Health and render endpoints
"""
