"""Core engines: similarity, normalization, extraction and comparison."""
