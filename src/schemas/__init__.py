"""Canonical models shared by the ingest pipeline and its consumers."""
