"""
Test suite for the EcoTracker application.

This package contains:
- Unit tests for the engine and service modules
- API endpoint tests
- Integration (workflow) tests
- Property-based tests
"""
