"""
floorweave - Floor plan layout and door-consistency engine.
"""

__version__ = "1.0.0"
