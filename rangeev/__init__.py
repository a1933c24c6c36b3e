"""
RangeEV: Preflop Range-vs-Range EV Simulator

Monte Carlo estimates of fold/call/raise expected value for every
starting hand class, given a hero range and an opponent range under a
flat single-street pot model.
"""

__version__ = "0.1.0"
