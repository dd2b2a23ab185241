"""
Core Business Logic
==================

Core modules for template rendering and PDF generation.

Modules:
- templating: Path resolution, tokenizing and rendering of HTML templates
- rendering: Document composition, browser surfaces, capture and print strategies
- pdf_generator: Generation entry point and browser pool lifecycle
- exceptions: Error taxonomy shared across the pipeline
"""
