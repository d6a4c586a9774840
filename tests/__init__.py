"""
Tests Package.

This package contains test suites for validating the architect/building graph
view, including unit tests for the builder, forces and layout engine, and
integration tests for the focus/drag interaction, the viewport and the HTTP
backend. The tests ensure correctness of graph construction, the cooling
schedule and the highlight and panel state machine.
"""

# Tests Package
