"""
Tournament Dashboard bracket bot.

Runs single-elimination brackets for tournament organizers: rounds, match
pairings, winner tracking and the champions ledger.
"""

__version__ = "0.3.0"
