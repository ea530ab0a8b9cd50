"""Drains the speech queue to a speech output."""

import logging
import subprocess
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

from .config import QUEUE_TIMER_INTERVAL_S
from .speech_queue import SpeechItem, SpeechQueue
from .timers import RepeatingTimer

logger = logging.getLogger(__name__)

DoneCallback = Callable[[], None]


class Speaker(ABC):
    """Speech output. Must call ``on_done`` once the text has been spoken or failed."""

    @abstractmethod
    def speak(self, text: str, on_done: DoneCallback) -> None:
        pass

    def cancel(self) -> None:
        """Interrupt the current utterance, if any."""
        pass


class LogSpeaker(Speaker):
    """Writes announcements to the log and completes immediately."""

    def __init__(self):
        self.spoken: List[str] = []

    def speak(self, text: str, on_done: DoneCallback) -> None:
        logger.info(f"[SPEECH] {text}")
        self.spoken.append(text)
        on_done()


class CommandSpeaker(Speaker):
    """
    Speaks through an external text-to-speech command.

    The text is appended as the last argument, e.g.
    ``CommandSpeaker(["termux-tts-speak"])`` or ``CommandSpeaker(["espeak", "-v", "pt-br"])``.
    """

    def __init__(self, command: Sequence[str], timeout: float = 30):
        self.command = list(command)
        self.timeout = timeout

    def speak(self, text: str, on_done: DoneCallback) -> None:
        try:
            subprocess.run(self.command + [text], check=True, timeout=self.timeout)
        except (subprocess.TimeoutExpired, FileNotFoundError, subprocess.SubprocessError) as e:
            logger.warning(f"Speech command failed: {e}")
        finally:
            on_done()


class SpeechAnnouncer:
    """
    Sequences queued announcements to a Speaker, one at a time.

    Two triggers feed the same ``drain()``: the speaker's completion
    callback and a backup timer. An in-flight flag makes ``drain()``
    idempotent, so an overlapping trigger never dequeues a second item
    while one is being spoken.

    Threads:
        - Caller thread: announce(), cancel(), speaker completions
        - Backup timer thread: periodic drain() (daemon)
    """

    def __init__(
        self,
        speaker: Speaker,
        queue: Optional[SpeechQueue] = None,
        backup_interval: Optional[float] = QUEUE_TIMER_INTERVAL_S,
    ):
        self.speaker = speaker
        self.queue = queue if queue is not None else SpeechQueue()
        self.current_item: Optional[SpeechItem] = None
        self._in_flight = False
        self._draining = False
        self._token = 0
        # Reentrant: queue observers may call back into announce() or drain()
        self._lock = threading.RLock()

        self._backup_timer: Optional[RepeatingTimer] = None
        if backup_interval:
            self._backup_timer = RepeatingTimer(backup_interval, self.drain, name="speech-queue-backup").start()

    @property
    def is_speaking(self) -> bool:
        return self._in_flight

    def announce(self, text: str, priority: float = 0) -> SpeechItem:
        """Queue an announcement and start draining if idle."""
        if isinstance(text, str):
            text = text.strip()
        with self._lock:
            item = self.queue.enqueue(text, priority)
        logger.debug(f"Queued {item} (size: {self.queue.size()})")
        self.drain()
        return item

    def drain(self) -> int:
        """
        Speak queued items until the queue is empty or an utterance is pending.

        Returns:
            Number of items handed to the speaker by this call
        """
        with self._lock:
            if self._draining:
                return 0
            self._draining = True

        started = 0
        while True:
            with self._lock:
                if self._in_flight or self.speaker is None:
                    self._draining = False
                    return started
                item = self.queue.dequeue()
                if item is None:
                    self._draining = False
                    return started
                self._token += 1
                self._in_flight = True
                self.current_item = item
                on_done = self._completion(self._token)

            logger.debug(f"Speaking {item}")
            started += 1
            try:
                self.speaker.speak(item.text, on_done)
            except Exception as e:
                logger.error(f"Speaker failed for {item}: {e}")
                on_done()

    def _completion(self, token: int) -> DoneCallback:
        done = threading.Event()

        def on_done():
            # Speakers may report both end and error; only the first counts
            if done.is_set():
                return
            done.set()
            if self._finish(token):
                self.drain()

        return on_done

    def _finish(self, token: int) -> bool:
        """Clear the in-flight state. Returns True if a drain should be triggered."""
        with self._lock:
            if token != self._token:
                return False
            self._in_flight = False
            self.current_item = None
            return not self._draining

    def cancel(self) -> int:
        """Stop the current utterance and discard every queued item."""
        with self._lock:
            self._token += 1
            removed = self.queue.clear()
            self._in_flight = False
            self.current_item = None
        if self.speaker is not None:
            self.speaker.cancel()
        logger.info(f"Speech cancelled and queue cleared ({removed} items removed)")
        return removed

    def destroy(self):
        """Stop the backup timer, cancel speech and drop the speaker."""
        if self._backup_timer is not None:
            self._backup_timer.cancel()
            self._backup_timer = None
        self.cancel()
        self.speaker = None
