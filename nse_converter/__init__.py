"""
NSE Converter - Intraday Bar Ingestion Tool

Converts vendor intraday 1-minute text files (one file per instrument) into
the LEAN on-disk data layout consumed by the trading engine.
"""

__version__ = "0.1.0"
__author__ = "NSE Converter Team"
