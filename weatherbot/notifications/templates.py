"""
Message texts for bot replies.
Replies are plain text; only the verbal forecast is sent as Markdown.
"""

from typing import Tuple


class MessageTemplates:
    """Static reply texts and formatters."""

    SUBSCRIBED = "You have subscribed to weather updates."
    ALREADY_SUBSCRIBED = "You are already subscribed."
    UNSUBSCRIBED = "You have unsubscribed from weather updates."
    NOT_SUBSCRIBED = "You are not currently subscribed."
    SAVE_FAILED = "Your subscription could not be saved. Please try again later."
    FETCH_FAILED = "Unable to fetch weather data at the moment."

    # Stands in for the suburb when reverse geocoding fails
    UNKNOWN_LOCATION = "Unbekannter Ort"

    @classmethod
    def format_help_message(cls, delivery_time: Tuple[int, int]) -> str:
        """
        Format the /start help text.

        Args:
            delivery_time: (hour, minute) of the daily delivery
        """
        hour, minute = delivery_time
        return (
            "Willkommen zum Wetter-Bot!\n\n"
            "Hier sind einige Befehle, die du verwenden kannst:\n\n"
            "/subscribe - Abonniere Wetteraktualisierungen für diesen Chat.\n"
            "/unsubscribe - Deabonniere Wetteraktualisierungen für diesen Chat.\n"
            "/get_weather - Erhalte aktuelle Wetterinformationen auf Anfrage "
            "(nur für den Bot-Besitzer).\n\n"
            f"Du wirst automatisch jeden Tag um {hour:02d}:{minute:02d} Uhr "
            "Wetteraktualisierungen erhalten, wenn du abonniert bist."
        )
