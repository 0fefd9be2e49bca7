"""Runtime layer: retry execution, concurrency primitives, observability."""
