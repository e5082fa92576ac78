"""
Drill - Vocabulary Practice Session Engine

Users upload word lists (units), then run practice sessions that quiz
them one word at a time. The package provides:
- A pure state machine for a single practice session
- A session repository (one active session per user)
- A polling sync client so a session survives reloads and extra tabs
- A REST API and a terminal client
"""

__version__ = "0.1.0"
