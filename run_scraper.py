"""
Simple runner - just run: python run_scraper.py --job okgolf

Usage:
    python run_scraper.py --list               # Show available jobs
    python run_scraper.py --job okgolf         # Run a job, resuming saved progress
    python run_scraper.py --job citeezon --no-resume  # Start fresh
    python run_scraper.py --job friendgolf --reset    # Forget saved progress

Press Ctrl+C to stop; progress is saved and the next run resumes from it.
"""
import sys

from golf_scraper.main import main

if __name__ == '__main__':
    sys.exit(main())
