"""Shared contracts for the TwinBot client.

Pydantic models for credentials, calendar, email and assistant payloads,
the result envelope every service returns, and the environment-driven
client configuration.
"""
