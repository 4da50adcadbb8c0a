#!/usr/bin/env python3
"""
Database management script for deployment.
Run this during the build/deployment pipeline to create the game tables
before the service starts taking traffic.
"""
import sys

from dotenv import load_dotenv


def deploy():
    """Run deployment tasks."""
    print("Creating game tables...")
    from leaderboard.app import create_app

    try:
        # The app factory creates any missing game table
        app = create_app()
    except Exception as e:
        print(f"Error creating game tables: {e}")
        sys.exit(1)

    print(f"✓ Game tables ready: {', '.join(app.games.names)}")


if __name__ == '__main__':
    load_dotenv()
    deploy()
