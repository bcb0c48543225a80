"""Service layer wiring the artifact cache, loader and engine together."""
