"""
Integration layer: the ledger collaborator that stores pool state and holder
balances and commits engine results atomically.
"""
