"""
Rate limiter configuration.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

# Keyed on client IP; every generation call costs real OpenAI money
limiter = Limiter(key_func=get_remote_address)
