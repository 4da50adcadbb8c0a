#!/usr/bin/env python3
"""
Entry point for the Leaderboard service.

Usage:
    python run.py

Environment Variables (also read from a .env file):
    FLASK_ENV: development or production (default: development)
    PORT: Port to run on (default: 5000)
    DATABASE_URL: PostgreSQL connection URL
    GAME_NAMES: Comma-separated game table names, e.g. game_1,game_2
    GAME_DISPLAY_NAMES: Comma-separated display names, same order as GAME_NAMES
"""
import os
import sys

from dotenv import load_dotenv


def run_leaderboard():
    """Run the leaderboard API."""
    from leaderboard.app import create_app

    try:
        app = create_app()
    except Exception as e:
        print(f"Failed to initialize database: {e}")
        sys.exit(1)

    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('FLASK_ENV', 'development') == 'development'

    print(f"Starting Leaderboard on port {port}...")
    app.run(host='0.0.0.0', port=port, debug=debug)


if __name__ == '__main__':
    load_dotenv()
    run_leaderboard()
