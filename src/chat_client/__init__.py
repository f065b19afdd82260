"""Conversational client: chat session, address maps and terminal front end."""
