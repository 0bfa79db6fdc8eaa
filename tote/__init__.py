"""Tote link cache: link preview metadata and offline page copies."""
