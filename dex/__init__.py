"""
dex/ - DEX pool access.
"""
