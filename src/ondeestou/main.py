"""Main tracker application."""

import sys
import json
import shlex
import signal
import logging
from typing import Any, Iterable, Mapping, Optional

from .config import DEVICE_TYPE, LOG_LEVEL, TTS_COMMAND, not_accepted_accuracy
from .address_cache import AddressCache
from .announcements import PriorityPolicy, build_change_text, build_full_text
from .announcer import CommandSpeaker, LogSpeaker, SpeechAnnouncer, Speaker
from .change_detector import ChangeDetails
from .errors import PositionError
from .geo_position import GeoPosition
from .geocoding import GeocodingService
from .position_manager import PositionEvent, PositionManager

logger = logging.getLogger(__name__)


class Tracker:
    """
    Composition root wiring the tracking pipeline.

    raw sample -> PositionManager -> GeocodingService -> AddressCache
    -> change callbacks -> SpeechAnnouncer -> Speaker

    Components:
        - PositionManager: accepts/rejects samples
        - GeocodingService: Nominatim reverse geocoding
        - AddressCache: cached resolution and change detection
        - SpeechAnnouncer: priority queue drained to the speaker
        - PriorityPolicy: which events are announced, and how urgently
    """

    def __init__(
        self,
        geocoder: Optional[GeocodingService] = None,
        speaker: Optional[Speaker] = None,
        policy: Optional[PriorityPolicy] = None,
        position_manager: Optional[PositionManager] = None,
        address_cache: Optional[AddressCache] = None,
        announcer: Optional[SpeechAnnouncer] = None,
        device_type: str = DEVICE_TYPE,
    ):
        self.policy = policy or PriorityPolicy()
        self.geocoder = geocoder or GeocodingService()
        self.position_manager = position_manager or PositionManager(
            not_accepted_accuracy=not_accepted_accuracy(device_type)
        )
        self.address_cache = address_cache or AddressCache()
        self.announcer = announcer or SpeechAnnouncer(speaker or LogSpeaker())
        self.running = False

        self._position_subscription = self.position_manager.subscribe(self._handle_position)
        for field in self.policy.field_changes:
            self.address_cache.set_change_callback(field, self._handle_address_change)

    def _handle_position(self, event: PositionEvent, position: Optional[GeoPosition], error: Optional[PositionError]):
        """Geocode accepted positions and announce the full address when the policy asks for it."""
        if position is None:
            logger.debug(f"Position not updated: {error}")
            return

        payload = self.geocoder.reverse_geocode(position.latitude, position.longitude)
        if payload is None:
            logger.debug(f"No address for {position}")
            return

        address = self.address_cache.resolve(payload)
        priority = self.policy.for_position_event(event)
        if priority is not None:
            self.announcer.announce(build_full_text(address), priority)

    def _handle_address_change(self, details: ChangeDetails):
        priority = self.policy.for_field(details.field)
        text = build_change_text(details)
        if priority is None or not text:
            return
        self.announcer.announce(text, priority)

    def process_sample(self, sample: Mapping[str, Any]) -> Optional[PositionEvent]:
        """Feed one raw position sample into the pipeline."""
        return self.position_manager.update(sample)

    def run(self, lines: Iterable[str]) -> int:
        """
        Process raw samples given as JSON lines.

        Returns:
            Number of samples that were accepted
        """
        self.running = True
        accepted = 0
        for line_number, line in enumerate(lines, start=1):
            if not self.running:
                break
            line = line.strip()
            if not line:
                continue
            try:
                sample = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping line {line_number}: invalid JSON ({e})")
                continue
            event = self.process_sample(sample)
            if event in (PositionEvent.REGULAR, PositionEvent.IMMEDIATE):
                accepted += 1
        return accepted

    def stop(self):
        """Stop processing input."""
        if not self.running:
            return
        logger.info("Stopping tracker...")
        self.running = False

    def destroy(self):
        """Release timers and references of every component."""
        self.stop()
        self._position_subscription.cancel()
        self.position_manager.destroy()
        self.address_cache.destroy()
        self.announcer.destroy()
        logger.info("Tracker destroyed")


def build_speaker(command: str = TTS_COMMAND) -> Speaker:
    """Speaker for the configured TTS command, or the log when none is set."""
    if command:
        return CommandSpeaker(shlex.split(command))
    return LogSpeaker()


def main():
    """Main entry point: read position samples (JSON lines) from a file or stdin."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # urllib3 is chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    tracker = Tracker(speaker=build_speaker())

    def _signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        tracker.stop()

    signal.signal(signal.SIGTERM, _signal_handler)

    logger.info(f"Starting tracker (device type: {DEVICE_TYPE})")
    try:
        if len(sys.argv) > 1:
            with open(sys.argv[1], encoding="utf-8") as source:
                accepted = tracker.run(source)
        else:
            accepted = tracker.run(sys.stdin)
        logger.info(f"Processed input, {accepted} positions accepted")
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        tracker.destroy()


if __name__ == "__main__":
    main()
