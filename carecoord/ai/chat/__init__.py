"""
AI chat proxy for the food-bank assistant.

Grounds every answer in the current inventory and service schedule by
rebuilding the system prompt per request, then persists the exchange.
"""
