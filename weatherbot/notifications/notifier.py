"""
Forecast pipeline and delivery.
Runs fetch -> transform -> render/summarize once and fans the result out
to subscribers.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from telegram import Bot, InputMediaPhoto, LinkPreviewOptions
from telegram.constants import ParseMode
from telegram.error import TelegramError
import pytz

from .templates import MessageTemplates
from ..charts import ChartRenderer, RenderedImage
from ..errors import ForecastBotError, DeliveryError
from ..storage import Subscriber, SubscriptionStore
from ..summary import SummaryGenerator
from ..weather import (
    ForecastRequest,
    NominatimClient,
    OpenMeteoClient,
    to_chart_specs,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Images and verbal forecast of one pipeline run, shared by all recipients."""
    images: List[RenderedImage]
    summary: str


@dataclass
class DeliveryReport:
    delivered: List[Subscriber] = field(default_factory=list)
    failed: List[Subscriber] = field(default_factory=list)


class Notifier:
    """
    Produces the forecast and sends it out.

    A pipeline run either completes fully or raises; partial results are
    never delivered. One subscriber failing does not stop delivery to the
    others.
    """

    def __init__(
        self,
        bot: Bot,
        store: SubscriptionStore,
        openmeteo: OpenMeteoClient,
        nominatim: NominatimClient,
        summarizer: SummaryGenerator,
        request: ForecastRequest,
        renderer: Optional[ChartRenderer] = None,
        timezone: pytz.timezone = pytz.UTC
    ):
        """
        Initialize the notifier.

        Args:
            bot: Telegram bot instance
            store: Subscriber store
            openmeteo: Forecast API client
            nominatim: Reverse geocoding client
            summarizer: Verbal forecast generator
            request: Fixed forecast request
            renderer: Chart renderer (default theme if omitted)
            timezone: Timezone for the summary timestamp
        """
        self.bot = bot
        self.store = store
        self.openmeteo = openmeteo
        self.nominatim = nominatim
        self.summarizer = summarizer
        self.request = request
        self.renderer = renderer or ChartRenderer()
        self.timezone = timezone

    async def _resolve_suburb(self) -> str:
        """Suburb name, or a placeholder when geocoding fails."""
        try:
            return await self.nominatim.resolve_suburb(
                self.request.latitude, self.request.longitude
            )
        except ForecastBotError as e:
            logger.warning(f"Could not resolve location name: {e}")
            return MessageTemplates.UNKNOWN_LOCATION

    async def run_pipeline(self) -> PipelineResult:
        """
        Produce the chart images and the verbal forecast.

        Charts are rendered in a worker thread while the summary request
        is in flight; both must succeed.

        Raises:
            TransportError: an API call failed
            DataShapeError: an API answered with unexpected data
        """
        suburb = await self._resolve_suburb()
        payload = await self.openmeteo.fetch_forecast(self.request)
        charts = to_chart_specs(payload)
        generated_at = datetime.now(self.timezone)

        images, summary = await asyncio.gather(
            asyncio.to_thread(self.renderer.render_all, charts),
            self.summarizer.summarize(payload, suburb, generated_at),
        )
        logger.info(f"Pipeline produced {len(images)} charts for {suburb}")
        return PipelineResult(images=images, summary=summary)

    async def send_result(
        self,
        chat_id: int,
        thread_id: Optional[int],
        result: PipelineResult
    ) -> None:
        """
        Send the chart album and then the verbal forecast to one destination.

        Raises:
            DeliveryError: Telegram rejected either message
        """
        media = [
            InputMediaPhoto(media=image.data, caption=image.caption)
            for image in result.images
        ]
        try:
            await self.bot.send_media_group(
                chat_id=chat_id,
                media=media,
                message_thread_id=thread_id
            )
            await self.bot.send_message(
                chat_id=chat_id,
                text=result.summary,
                parse_mode=ParseMode.MARKDOWN,
                link_preview_options=LinkPreviewOptions(is_disabled=True),
                message_thread_id=thread_id
            )
        except TelegramError as e:
            raise DeliveryError(
                f"Failed to deliver forecast to chat {chat_id}: {e}",
                subscriber=Subscriber(chat_id, thread_id)
            ) from e

    async def deliver_to_all(
        self,
        subscribers: Sequence[Subscriber],
        result: PipelineResult
    ) -> DeliveryReport:
        """
        Send one pipeline result to every subscriber in turn.

        Args:
            subscribers: Destinations
            result: Images and summary to send

        Returns:
            Which subscribers were reached and which failed
        """
        report = DeliveryReport()
        for subscriber in subscribers:
            try:
                await self.send_result(subscriber.chat_id, subscriber.thread_id, result)
                report.delivered.append(subscriber)
            except DeliveryError as e:
                logger.error(str(e))
                report.failed.append(subscriber)

        logger.info(
            f"Delivered forecast to {len(report.delivered)} subscribers, "
            f"{len(report.failed)} failed"
        )
        return report

    async def scheduled_delivery(self) -> Optional[DeliveryReport]:
        """
        Daily job: run the pipeline and deliver to all subscribers.

        Nothing is fetched when there are no subscribers. A failed run is
        logged and that day's delivery is skipped.
        """
        if not len(self.store):
            logger.info("No subscribers, skipping scheduled forecast")
            return None

        try:
            result = await self.run_pipeline()
        except ForecastBotError as e:
            logger.error(f"Scheduled forecast failed, skipping delivery: {e}")
            return None

        return await self.deliver_to_all(self.store.subscribers(), result)
