"""
vision-relay: Telegram webhook → OpenAI vision → Telegram reply.
"""

__version__ = "0.1.0"
