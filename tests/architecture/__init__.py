"""Architecture validation tests.

These tests check layering, dependency direction and the conventions
ports and domain models follow.
"""
