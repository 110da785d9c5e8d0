"""
Tests Package

Test structure:
- tests/test_scanner.py - Byte-level scanning of scores bodies
- tests/test_scores.py - Score identity and the ordered Scores collection
- tests/test_state.py - Cursor state persistence
- tests/test_extractor_job.py - Relay job, publisher and scheduler with mocked I/O
- tests/conftest.py - Shared fixtures
"""
