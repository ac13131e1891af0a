"""
Feature modules for TriTimes.

Each feature is a self-contained module with:
- models.py - dataclasses for the feature's records
- service.py - Business logic (optional)
- stats/histogram/search modules - Calculation logic
"""
