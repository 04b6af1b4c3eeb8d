"""
Test support utilities for sequelorm tests.

Fakes that satisfy the library's protocols without a real database, so
tests can assert on exactly which statements were issued.
"""
