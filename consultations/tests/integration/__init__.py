"""
Integration tests for the consultations API and middleware.
"""
