"""
Request lifecycle: options, backoff, retry policy, shared state and the
orchestrator driving each request.
"""
