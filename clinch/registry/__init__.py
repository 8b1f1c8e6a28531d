"""Registry — the source of truth for deployed contracts.

The registry provides:
- Persistence: the contract list as one atomically replaced JSON file
- Conflict resolution: unique names, address aliases
- ABI vault: managed copies of interface definitions
- Queries: filter, search, sort and per-network statistics
"""
