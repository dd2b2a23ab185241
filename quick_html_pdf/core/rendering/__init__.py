"""
Rendering Module
================

Document composition and PDF production with browser automation.

Components:
- composer: Wrap rendered fragments in a print-ready HTML document
- surface: Browser pool and Playwright-backed render surfaces
- pagination: Page band planning
- capture_strategy: Screenshot-per-page PDF assembly
- print_strategy: Native print-to-PDF
- assembly: PDF assembly sinks
- download: Download sink for finished files
"""
