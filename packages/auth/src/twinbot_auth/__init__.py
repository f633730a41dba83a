"""Supabase access-token helpers for the TwinBot client."""
