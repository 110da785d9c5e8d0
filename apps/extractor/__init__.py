"""
Extractor App - Score Relay

Responsibilities:
- Periodic execution (interval trigger via APScheduler)
- Cursor-based pagination of the scores API, cursor persisted between runs
- Verbatim extraction of every score from the response body
- Forwarding of unseen scores, byte for byte, to Redis Pub/Sub

Output:
- Redis channel=scores.raw, one binary message per score
- Redis channel=scores.events, payload={type, count, oldest_id, newest_id, ts}
"""
