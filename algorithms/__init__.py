"""
Algorithms package for the OS Concepts Simulator.
Contains CPU scheduling, memory allocation, Banker's safety check,
resource-allocation graph and sorting trace implementations.
"""
