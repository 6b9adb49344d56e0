"""Application layer: ports describing the collaborators of the dispatch engine."""
