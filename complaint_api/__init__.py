"""Complaint Management API."""
