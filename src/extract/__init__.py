"""Spreadsheet extraction.

This module reads named sheets from the tabular source and turns them
into header-keyed records for point-in-time snapshots.
"""
