"""
cricket_core - ball-by-ball match simulation, player auctions and tournaments
"""
__version__ = "0.1.0"
