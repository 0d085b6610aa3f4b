"""Notification helpers.

Delivery itself belongs to Apprise or the Telegram Bot API; this package only
decides whether to notify, builds the message, and hands it over.
"""
