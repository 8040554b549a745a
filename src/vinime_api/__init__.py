"""
REST API exposing the vinime-bot scraper and catalog over HTTP.
"""
