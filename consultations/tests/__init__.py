"""
Test suite for the consultations application.

This package is organized into the following modules:
- unit: Tests for individual components and services in isolation
- integration: Tests for the API endpoints and middleware
- functional: Tests for complete patient/doctor flows
"""
