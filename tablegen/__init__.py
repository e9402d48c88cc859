"""
tablegen — schema-to-model code generator.
Reads a table's catalog metadata and writes a typed data-access module for it.
"""
__version__ = "1.0.0"
