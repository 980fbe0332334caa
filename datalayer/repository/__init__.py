"""Repository layer: catalog queries (SQLite).

Keep functions thin and focused, so services avoid SQL strings.
"""
