"""
Run the Trainer Marketplace terminal client.

Usage:
    python run_cli.py [COMMAND] [OPTIONS]

Commands:
    register   Create a new account
    login      Sign in and save credentials locally (~/.trainer-marketplace/session.json)
    logout     Clear stored credentials
    whoami     Show the currently logged-in user
    trainers   Browse trainers
    hire       Send a hire request to a trainer
    requests   List pending hire requests (trainers)
    respond    Accept or reject a hire request (trainers)
    history    Print a conversation
    send       Send one message
    chat       Interactive chat session

Examples:
    python run_cli.py login
    python run_cli.py trainers --location berlin
    python run_cli.py chat 3f2a...

Environment variables (all optional):
    API_BASE_URL        Where the API runs (default: http://localhost:8000)
    CHAT_POLL_INTERVAL  Seconds between history polls in chat (default: 5)
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

from adapters.cli.main import app

if __name__ == "__main__":
    app()
