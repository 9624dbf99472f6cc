"""Clients for services outside the household store."""
