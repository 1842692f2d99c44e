"""Core data model and embed registry.

WHY: The document model and the emoji registry are the stable contract
between the editor, the markdown codec and the storage adapters.

HOW: document.py defines the operation types and the immutable Document,
registry.py maps ASCII variant keys to emoji glyphs.

RULES:
- Documents are never mutated in place; editing helpers return new ones
- The shared registry is read-only once built
"""
