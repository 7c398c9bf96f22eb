"""
Test Fixtures and Utilities

Record builders and seeded synthetic order books for matching tests.
"""
