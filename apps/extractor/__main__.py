"""
Relay entry point: python -m apps.extractor

Scheduled by default; set RUN_ONCE=true for a single run.
"""

from apps.extractor.scheduler import run

if __name__ == "__main__":
    run()
