"""
Test Suite
==========

Test suite matching the quick_html_pdf package structure.

Test Categories:
- unit: Unit tests for individual components
- integration: HTTP API contract tests
"""
