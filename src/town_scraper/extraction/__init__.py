# ABOUTME: Data extraction from the rendered web map
# ABOUTME: Pipeline Stage 1: page → raw observations (object graph first, popups as fallback)

"""
Extraction Layer: Get raw observations from the map page

This layer handles:
- The page contract and its Playwright implementation
- Probing in-page marker objects without executing their behavior
- Clicking DOM markers and reading their popups
- Parsing observation text into typed fields (analysis/)

Data Flow: Map page → RawObservation → ParsedFields → core/ reconciliation
"""

# Sources are imported from their modules to keep Playwright out of the core import path
# Use: from town_scraper.extraction.object_graph import ObjectGraphSource
