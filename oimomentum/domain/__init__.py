"""Domain layer: pure computation, no I/O."""
