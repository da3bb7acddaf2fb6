"""
Data ingestion module.

Handles symbol resolution from vendor filenames, line parsing and validation,
and per-file batch collection of normalized bars.
"""
