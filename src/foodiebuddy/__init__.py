"""
FoodieBuddy - fridge and grocery list engine.

Keeps a user's two ingredient collections (fridge, grocery list) in a
Supabase table and stages bulk edits against them:
- Name normalization for duplicate detection and matching
- Edit sessions that accumulate changes in memory
- An ordered commit pipeline that makes a session durable
- Cross-collection lookup for the "shop this recipe" flow
"""

__version__ = "1.0.0"
