"""Errors, results, logging and settings shared by the client."""
