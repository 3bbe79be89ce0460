"""
Inventory models.

- Item (current stock, reorder threshold, derived display name)
- ItemBatch (expiry-tracked sub-quantities of an item)
- Transaction (append-only audit log of every stock change)
"""
