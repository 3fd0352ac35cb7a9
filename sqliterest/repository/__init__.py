"""Repository layer: SQL text, statement execution and catalog reads (SQLite).

Keep functions thin and focused, so services never assemble SQL strings.
"""
