"""
holosync - hand-tracking CSV tools

Loads pivoted hand-tracking recordings (timestamps, chirality and 26 joint
poses per row) and lists, summarizes and plots them.
"""

__version__ = "1.0.0"
