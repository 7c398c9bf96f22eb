"""
Command Line Interface Package

Unified CLI for the reconciler.

Command Structure:
- reconciler: Main entry point with utility commands (version, config)
- reconciler match: Run matches from CSV files, the record store, or sample data
- reconciler data: Import, list, seed and reset stored records
"""
