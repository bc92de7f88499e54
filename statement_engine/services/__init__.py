"""Engine services: evaluation, resolution, aggregation, validation, batch run."""
