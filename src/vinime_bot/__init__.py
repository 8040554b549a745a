"""
VinimeBot - A Telegram bot for browsing and watching anime from otakudesu.

This package provides the otakudesu scraper, the persistent anime catalog,
genre browsing and the Telegram handlers that expose them.
"""
__version__ = "0.1.0"
