"""
Shared utility functions.

This subpackage includes:
- loading the run configuration (config/pipeline.yaml)
- path management helpers
- lightweight logging helpers used across the project.
"""
