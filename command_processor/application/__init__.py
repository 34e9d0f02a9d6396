"""Application layer - handler contract and registration decorators."""
