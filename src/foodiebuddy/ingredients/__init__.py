"""
FoodieBuddy - Ingredient engine.

- normalize: standard names for matching
- session: in-memory staging of fridge/grocery edits
- committer: ordered commit of a session to the store
- matcher: cross-collection ownership lookup
- shopping: recipe shopping, fridge-to-groceries transfer, check toggling
"""
