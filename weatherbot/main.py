"""
Main entry point for the forecast bot.
Initializes all components and starts the bot.
"""

import asyncio
import logging
import os
import signal

from telegram import Update
from telegram.ext import Application, CommandHandler
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
import pytz

from .config import Config
from .storage import SubscriptionStore
from .summary import SummaryGenerator
from .weather import OpenMeteoClient, NominatimClient
from .notifications import Notifier
from .handlers import CommandHandlers

logger = logging.getLogger(__name__)


class WeatherBot:
    """
    Main bot class that coordinates all components.
    """

    def __init__(self):
        """Initialize the bot."""
        self.store: SubscriptionStore = None
        self.openmeteo: OpenMeteoClient = None
        self.nominatim: NominatimClient = None
        self.summarizer: SummaryGenerator = None
        self.notifier: Notifier = None
        self.scheduler: AsyncIOScheduler = None
        self.application: Application = None
        self._running = False

    async def initialize(self) -> None:
        """
        Initialize all bot components.
        Settings come from the environment, optionally overridden by CONFIG_PATH.
        """
        config_path = os.getenv("CONFIG_PATH")
        if config_path:
            Config.load_file(config_path)

        Config.setup_logging()
        logger.debug("Initializing forecast bot...")

        errors = Config.validate()
        if errors:
            for error in errors:
                logger.error(f"Config error: {error}")
            raise ValueError("Invalid configuration. Check .env or CONFIG_PATH.")

        Config.ensure_data_dir()
        timezone = Config.get_timezone()

        self.store = SubscriptionStore(Config.SUBSCRIPTIONS_PATH)

        # API clients
        self.openmeteo = OpenMeteoClient()
        self.nominatim = NominatimClient()
        self.summarizer = SummaryGenerator(
            api_key=Config.OPENAI_API_KEY,
            model=Config.OPENAI_MODEL,
            base_url=Config.OPENAI_BASE_URL
        )

        # Build telegram application
        self.application = (
            Application.builder()
            .token(Config.BOT_TOKEN)
            .build()
        )

        self.notifier = Notifier(
            bot=self.application.bot,
            store=self.store,
            openmeteo=self.openmeteo,
            nominatim=self.nominatim,
            summarizer=self.summarizer,
            request=Config.forecast_request(),
            timezone=timezone
        )

        self._setup_handlers()
        self._setup_scheduler(timezone)

        logger.debug("Forecast bot initialized successfully")

    def _setup_handlers(self) -> None:
        """Setup Telegram command handlers."""
        cmd_handlers = CommandHandlers(self.store, self.notifier)

        self.application.add_handler(
            CommandHandler("start", cmd_handlers.start_command)
        )
        self.application.add_handler(
            CommandHandler("subscribe", cmd_handlers.subscribe_command)
        )
        self.application.add_handler(
            CommandHandler("unsubscribe", cmd_handlers.unsubscribe_command)
        )
        self.application.add_handler(
            CommandHandler("get_weather", cmd_handlers.get_weather_command)
        )

        logger.debug("Command handlers registered")

    def _setup_scheduler(self, timezone: pytz.timezone) -> None:
        """Setup the daily delivery job."""
        self.scheduler = AsyncIOScheduler(timezone=timezone)
        hour, minute = Config.delivery_time()

        self.scheduler.add_job(
            self._scheduled_delivery,
            trigger=CronTrigger(hour=hour, minute=minute, timezone=timezone),
            id="daily_forecast",
            name="Daily forecast delivery",
            replace_existing=True
        )

        logger.debug(f"Scheduler configured: daily forecast at {hour:02d}:{minute:02d}")

    async def _scheduled_delivery(self) -> None:
        """Scheduled job to deliver the forecast to all subscribers."""
        logger.debug("Running scheduled forecast delivery")
        try:
            await self.notifier.scheduled_delivery()
        except Exception as e:
            logger.error(f"Error in scheduled forecast delivery: {e}")

    async def start(self) -> None:
        """Start the bot."""
        if self._running:
            logger.warning("Bot is already running")
            return

        self._running = True
        logger.debug("Starting forecast bot...")

        self.scheduler.start()

        # Start bot polling
        await self.application.initialize()
        await self.application.start()
        await self.application.updater.start_polling(
            allowed_updates=Update.ALL_TYPES
        )

        logger.info("Forecast bot is running")

        # Keep running until stopped
        while self._running:
            await asyncio.sleep(1)

    async def stop(self) -> None:
        """Stop the bot gracefully."""
        logger.debug("Stopping forecast bot...")
        self._running = False

        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)

        # Stop bot (updater may already be stopped)
        if self.application:
            try:
                if self.application.updater:
                    await self.application.updater.stop()
            except RuntimeError:
                pass
            try:
                await self.application.stop()
                await self.application.shutdown()
            except RuntimeError:
                # never initialized
                pass

        # Close API clients
        for client in (self.openmeteo, self.nominatim, self.summarizer):
            if client:
                await client.close()

        logger.debug("Forecast bot stopped")


async def main() -> None:
    """Main entry point."""
    bot = WeatherBot()

    # Setup signal handlers for graceful shutdown
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.debug("Received shutdown signal")
        asyncio.create_task(bot.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    try:
        await bot.initialize()
        await bot.start()
    except KeyboardInterrupt:
        logger.debug("Interrupted by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise
    finally:
        await bot.stop()


def run() -> None:
    """Run the bot (blocking)."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
