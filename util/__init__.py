"""
Shared helpers: retry/fix logic, type checks, name validation and file I/O.
"""
