"""Scraping and aggregation engines."""
