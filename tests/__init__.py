"""
Test Suite for the Order Reconciler

Test Structure:
- fixtures/: Shared record builders and synthetic data
- unit/: Unit tests mirroring src/ package structure
- integration/: CLI and end-to-end workflow tests

All test data is synthetic.
"""
