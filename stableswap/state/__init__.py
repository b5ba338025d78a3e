"""
Pool state, amount conventions and holder balance tables.
"""
