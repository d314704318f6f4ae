"""
Integration test modules

Tests for the Braintree adapter and the SDK client it delegates to.
"""
