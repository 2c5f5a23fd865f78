"""
AnythingLLM Bridge

A thin client for the AnythingLLM REST API: workspaces, chat, document
ingestion, embeddings and admin endpoints, exposed as plain method calls
that return the server's JSON payloads.
"""

__version__ = "0.1.0"
