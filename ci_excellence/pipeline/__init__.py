"""Pipeline steps, their testability modes, and job status reduction."""
