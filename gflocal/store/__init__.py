"""
Dataset store.

Responsibilities:
- Define the restaurant record schema shared by every component.
- Read the JSON dataset fully into memory.
- Rewrite the dataset wholesale (atomic rename) after a mutation.
"""
