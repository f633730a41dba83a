"""Command-line front end for the TwinBot client."""
