"""Build pipeline: loading, parsing, rendering and writing pages."""
