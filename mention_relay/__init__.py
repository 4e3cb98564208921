"""Slack mention relay.

This package bridges Slack ``app_mention`` webhooks to an OpenAI-compatible
chat completion endpoint, providing:
- Mention webhook intake with asynchronous processing
- Thread history lookup for threaded mentions
- Optional GitHub deployment pull request actions (find, open, merge)
- Reply delivery through a Slack incoming webhook
"""
