"""
prize-alloc: Prize-draw marketing budget allocator

Splits a fixed marketing budget across (period x prize tier x channel)
response curves with a discrete greedy allocator, and rolls the result
up into tier and channel views for scenario planning.
"""

__version__ = "0.1.0"
