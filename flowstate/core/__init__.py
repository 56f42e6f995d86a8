"""
Core modules for FlowState.

This package contains the footprint calculator, the submission windows
and the streak tracker.
"""
