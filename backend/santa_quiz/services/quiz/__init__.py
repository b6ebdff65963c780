"""Quiz round domain services.

Scoring tables, the countdown timer, the round controller state machine and
its collaborators (question source, result aggregation, leaderboard store).
Routes and socket handlers import from here; nothing in this package knows
about HTTP requests.
"""
