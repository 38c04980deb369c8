# neurosignals/core/__init__.py

"""
Core numeric routines, the recording model and the analytics engine.
"""
