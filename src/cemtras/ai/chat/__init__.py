"""
AI chat module for cement plant expertise.

Holds the per-client chat session, sends role-conditioned prompts to the
model and saves finished conversations for signed-in users.
"""
