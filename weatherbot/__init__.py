"""
Telegram Forecast Chart Bot
===========================
Sends a daily hourly forecast for one location as charts plus a short
verbal report to subscribed Telegram chats.
"""

__version__ = "1.0.0"
__author__ = "Forecast Chart Bot"
