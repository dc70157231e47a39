"""
Services Layer

Lineup board, score sheet and match result logic that:
- Works on plain domain state (BoardState, ScoreSheet) or a Session
- Does NOT depend on HTTP request/response objects
- Only writes through lineup_repository, and only lineup_save commits
"""
