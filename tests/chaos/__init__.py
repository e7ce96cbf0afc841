"""
Chaos monkey testing suite.

Tests Jim's fault decisions under controlled randomness:
- Connection acceptance and forced disconnects
- Link speed throttling
- Sender, recipient and authentication rejection
"""
