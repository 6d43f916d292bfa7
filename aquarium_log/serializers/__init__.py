"""
Aquarium Log Backend: Serializers (read-model decoration)
===========================================================

Turn ORM rows plus the caller's context into response schemas. Each
module loads what it needs in batch for the whole page, then projects
rows without querying per row.
"""
