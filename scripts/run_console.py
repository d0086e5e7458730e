#!/usr/bin/env python3
"""
Console runner for the query assistant.

This script loads the project's .env file and starts the interactive
console against the configured backend.
"""

import sys
from pathlib import Path

# Add the src directory to the Python path
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

# Load environment variables
from dotenv import load_dotenv

env_file = project_root / ".env"
if env_file.exists():
    load_dotenv(env_file)
    print(f"✓ Loaded environment variables from {env_file}")
else:
    print(f"⚠ No .env file found at {env_file}")
    print("  Using the local development backend")

if __name__ == "__main__":
    from query_assistant.cli import main
    from query_assistant.config import get_settings

    settings = get_settings()

    print("🚀 Starting query assistant console...")
    print(f"🔗 Backend: {settings.backend.base_url}")
    print("⌨️  Commands: :gen <prompt>, :edit <sql>, :run, :history, :quit")
    print()

    main()
