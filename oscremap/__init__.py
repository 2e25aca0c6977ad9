"""
oscremap - OSC address remapping for lighting-control output.

Modules:
    pattern: Address pattern matching and wildcard rewriting
    validation: Mapping entry validation rules
    routes: Per-remote route tables (remap, passthrough, filter prefix)
    config: YAML config model and fail-safe loader
    engine: Remap engine fanning events out to every route table
    osc: python-osc boundary (message building, dispatcher handler)
"""

__version__ = "0.1.0"

# Note: Modules are imported on-demand to keep `python -m oscremap` free of
# import side effects.
# Use: from oscremap import routes, config, engine, etc.
