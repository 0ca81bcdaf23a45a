"""Asset lifecycle and reconciliation.

This module keeps item images in object storage consistent with the
references held in the relational store, without cross-store transactions.
"""
