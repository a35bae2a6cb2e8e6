# portfolio_tracker/__init__.py
"""
Personal portfolio tracker: valuation and aggregation core.

Tracks recurring and fixed deposits, stocks, mutual funds, cryptocurrency
and gold, and derives current value, gain, day change and allocation from
stored transactions plus live quotes.
"""

__version__ = "1.0.0"
