"""
Chat-related prompts and fixed assistant replies.
"""

# System prompt for chats without an agent
DEFAULT_SYSTEM_PROMPT = "You are a helpful and friendly assistant."

# Stored as the assistant reply when generation fails for any reason
FALLBACK_MESSAGE = "Sorry, I couldn't generate a response."
