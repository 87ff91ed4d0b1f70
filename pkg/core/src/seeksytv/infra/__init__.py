"""
Infrastructure layer - settings, logging, remote service access and errors.

This layer contains the technical concerns the playback runtime depends on
but does not own: configuration, structured logging, and the HTTP client for
the hosted database and its edge functions.
"""
