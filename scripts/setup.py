#!/usr/bin/env python3
"""Setup script for Bitcoin Influencer Match."""

import os
import shutil
import subprocess
import sys
from pathlib import Path


def main():
    """Run setup tasks."""
    print("=" * 80)
    print("Bitcoin Influencer Match - Setup")
    print("=" * 80)

    if sys.version_info < (3, 11):
        print("Error: Python 3.11 or higher is required")
        sys.exit(1)

    print("\n✓ Python version check passed")

    print("\n Creating directories...")
    for dir_path in ["data/db", "data/logs"]:
        Path(dir_path).mkdir(parents=True, exist_ok=True)
        print(f"  ✓ Created {dir_path}")

    print("\n📦 Installing dependencies...")
    try:
        subprocess.run(
            [sys.executable, "-m", "pip", "install", "-e", "."],
            check=True,
        )
        print("  ✓ Dependencies installed")
    except subprocess.CalledProcessError:
        print("  ✗ Failed to install dependencies")
        sys.exit(1)

    if not os.path.exists(".env"):
        print("\n⚠ No .env file found. Creating from .env.example...")
        if os.path.exists(".env.example"):
            shutil.copy(".env.example", ".env")
            print("  ✓ Created .env file - please add your OPENAI_API_KEY")
        else:
            print("  ✗ .env.example not found")
    else:
        print("\n✓ .env file exists")

    print("\n🗄 Initializing database...")
    try:
        subprocess.run([sys.executable, "-m", "influencer_match", "init-db"], check=True)
        print("  ✓ Database initialized")
    except subprocess.CalledProcessError:
        print("  ✗ Failed to initialize database")
        sys.exit(1)

    print("\n" + "=" * 80)
    print("✅ Setup completed successfully!")
    print("=" * 80)
    print("\nNext steps:")
    print("1. Edit .env file with your OpenAI API key")
    print("2. Run 'python -m influencer_match seed config/creators.example.yaml' to load creators")
    print("3. Run 'python -m influencer_match api' to start the API server")


if __name__ == "__main__":
    main()
