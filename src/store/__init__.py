"""Storage layer.

This module persists extraction snapshots and talks to the relational
store. It also hosts the SDK client that ties the layers together.
"""
