"""
Quick HTML PDF
==============

Render HTML templates with nested data into paginated, print-ready PDF documents.

This package provides:
- A small template engine with escaped/raw interpolation and loop blocks
- Print-ready document composition with page size, margins and header/footer bands
- Native Chromium print-to-PDF output through Playwright
- Page-by-page screenshot capture assembled into a PDF with ReportLab
- A FastAPI endpoint for HTTP access
"""

__version__ = "1.0.0"
__author__ = "Quick HTML PDF Team"
