"""
Utility modules for hand-data loading, analysis, results and plotting.
"""
