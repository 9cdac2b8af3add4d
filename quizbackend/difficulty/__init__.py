"""
Question difficulty subsystem.

Adaptive difficulty rating for quiz questions: a pure classifier over the
rolling success rate, an attempt accumulator that keeps the remote store
authoritative, a TTL snapshot cache of file -> tier, and a paginated bulk
loader for reporting.
"""
