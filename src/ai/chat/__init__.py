"""
AI Chat module for the restaurant guide.

This module exposes the completion endpoint that proxies a client's message
log to the language model and streams the answer back as plain text.
"""
