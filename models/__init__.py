"""
Models package for the OS Concepts Simulator.
Contains entity models and the per-simulator session states.
"""
