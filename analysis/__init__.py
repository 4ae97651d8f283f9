"""
Analysis package for the OS Concepts Simulator.
Contains the event log and schedule metrics.
"""
