"""
Operations Layer - bracket engine

This package holds the headless bracket logic. It never talks to Discord or
the database; services and cogs drive it through BracketEngine commands.

Architecture:
- Components: PlayerPool, RoundRegistry, WinnerLedger hold state
- Controllers: MatchPairingEngine, MatchOutcomeResolver and
  PlayerMovementController apply the bracket rules to that state
- Engine: BracketEngine runs commands atomically and checks invariants
"""
