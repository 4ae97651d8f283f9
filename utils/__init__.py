"""
Utilities for the OS Concepts Simulator: errors, validation, ids, logging
and scenario loading.
"""
