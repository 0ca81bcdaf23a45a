"""Idempotent loading.

This module maps snapshot records into canonical entities and inserts
them into the relational store in dependency order.
"""
