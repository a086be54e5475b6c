"""
Unit tests for individual components of the consultations application.
"""
