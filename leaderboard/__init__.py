"""
Leaderboard Service - per-game player scores

Responsibilities:
- One table per configured game, created at startup
- CSV bulk import replacing every game table
- Adding/removing a member across all games
- Per-game leaderboards, top three and score updates
"""
