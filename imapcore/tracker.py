"""Tracking mailbox state for each session of a mailbox.

Every session keeps its own view of the mailbox, because IMAP clients
receive mailbox updates asynchronously. Updates are queued per session and
written out when the session polls or idles.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

_IDLE_TICK = 0.05  # seconds between checks of the stop event while idling


class UpdateWriter(Protocol):
    """Receives mailbox updates dequeued from a session tracker."""

    def write_expunge(self, seq_num: int) -> None: ...

    def write_num_messages(self, n: int) -> None: ...

    def write_mailbox_flags(self, flags: Sequence[str]) -> None: ...

    def write_message_flags(self, seq_num: int, uid: int, flags: Sequence[str]) -> None: ...


@dataclass(frozen=True)
class _FetchUpdate:
    seq_num: int
    uid: int
    flags: tuple[str, ...]


@dataclass(frozen=True)
class _Update:
    expunge: int = 0
    num_messages: int = 0
    mailbox_flags: Optional[tuple[str, ...]] = None
    fetch: Optional[_FetchUpdate] = None

    def write_to(self, writer: UpdateWriter) -> None:
        if self.expunge:
            writer.write_expunge(self.expunge)
        elif self.num_messages:
            writer.write_num_messages(self.num_messages)
        elif self.mailbox_flags is not None:
            writer.write_mailbox_flags(list(self.mailbox_flags))
        elif self.fetch is not None:
            writer.write_message_flags(
                self.fetch.seq_num, self.fetch.uid, list(self.fetch.flags)
            )
        else:
            raise ValueError(f"imapserver: unknown tracker update {self!r}")


class MailboxTracker:
    """Tracks the state of a mailbox shared by several sessions."""

    def __init__(self, num_messages: int) -> None:
        self._lock = threading.Lock()
        self._num_messages = num_messages
        self._sessions: set[SessionTracker] = set()

    @property
    def num_messages(self) -> int:
        """The number of messages in the mailbox, as the server sees it."""
        return self._num_messages

    def new_session(self) -> SessionTracker:
        """Create a session tracker; it must be closed once the session ends."""
        session = SessionTracker(self)
        with self._lock:
            self._sessions.add(session)
        return session

    def _remove(self, session: SessionTracker) -> None:
        with self._lock:
            self._sessions.discard(session)

    def _queue_update(self, update: _Update, source: Optional[SessionTracker]) -> None:
        with self._lock:
            if update.expunge and update.expunge > self._num_messages:
                raise ValueError(
                    f"imapserver: expunge sequence number ({update.expunge}) out of "
                    f"range ({self._num_messages} messages in mailbox)"
                )
            if update.num_messages and update.num_messages < self._num_messages:
                raise ValueError(
                    "imapserver: cannot decrease mailbox number of messages from "
                    f"{self._num_messages} to {update.num_messages}"
                )

            for session in self._sessions:
                if source is not None and session is source:
                    continue
                session._queue_update(update)

            if update.expunge:
                self._num_messages -= 1
            elif update.num_messages:
                self._num_messages = update.num_messages

    def queue_expunge(self, seq_num: int) -> None:
        """Queue an EXPUNGE update."""
        if seq_num == 0:
            raise ValueError("imapserver: invalid expunge message sequence number")
        self._queue_update(_Update(expunge=seq_num), None)

    def queue_num_messages(self, n: int) -> None:
        """Queue an EXISTS update."""
        self._queue_update(_Update(num_messages=n), None)

    def queue_mailbox_flags(self, flags: Optional[Sequence[str]]) -> None:
        """Queue a FLAGS update."""
        self._queue_update(_Update(mailbox_flags=tuple(flags or ())), None)

    def queue_message_flags(
        self,
        seq_num: int,
        uid: int,
        flags: Sequence[str],
        source: Optional[SessionTracker] = None,
    ) -> None:
        """Queue a FETCH FLAGS update, not dispatched to source if given."""
        fetch = _FetchUpdate(seq_num=seq_num, uid=uid, flags=tuple(flags or ()))
        self._queue_update(_Update(fetch=fetch), source)


class SessionTracker:
    """Tracks the state of a mailbox as one IMAP client sees it."""

    def __init__(self, mailbox: MailboxTracker) -> None:
        self._mailbox: Optional[MailboxTracker] = mailbox
        self._lock = threading.Lock()
        self._queue: list[_Update] = []
        self._notify: Optional[threading.Event] = None

    def __enter__(self) -> SessionTracker:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._mailbox is not None:
            self.close()

    def _require_mailbox(self) -> MailboxTracker:
        if self._mailbox is None:
            raise RuntimeError("imapserver: session tracker is closed")
        return self._mailbox

    def close(self) -> None:
        """Unregister the session from its mailbox."""
        mailbox = self._require_mailbox()
        mailbox._remove(self)
        self._mailbox = None

    def _queue_update(self, update: _Update) -> None:
        with self._lock:
            self._queue.append(update)
            notify = self._notify
        if notify is not None:
            notify.set()

    def poll(self, writer: UpdateWriter, allow_expunge: bool) -> None:
        """Write pending updates; without allow_expunge stop at the first EXPUNGE."""
        with self._lock:
            if allow_expunge:
                updates, self._queue = self._queue, []
            else:
                stop = next(
                    (i for i, update in enumerate(self._queue) if update.expunge),
                    len(self._queue),
                )
                updates = self._queue[:stop]
                self._queue = self._queue[stop:]

        for update in updates:
            update.write_to(writer)

    def idle(self, writer: UpdateWriter, stop: threading.Event) -> None:
        """Write updates as they arrive until the stop event is set.

        Only one idle call may run at a time for a session.
        """
        notify = threading.Event()
        with self._lock:
            if self._notify is not None:
                raise RuntimeError(
                    "imapserver: only a single SessionTracker.idle call is allowed at a time"
                )
            self._notify = notify
        try:
            while not stop.is_set():
                if notify.wait(_IDLE_TICK):
                    notify.clear()
                    self.poll(writer, True)
        finally:
            with self._lock:
                self._notify = None

    def decode_seq_num(self, seq_num: int) -> int:
        """Convert a sequence number from the client view to the server view.

        Returns 0 if the message does not exist for the server.
        """
        if seq_num == 0:
            return 0
        mailbox = self._require_mailbox()
        with self._lock:
            for update in self._queue:
                if not update.expunge:
                    continue
                if seq_num == update.expunge:
                    return 0
                if seq_num > update.expunge:
                    seq_num -= 1
            if seq_num > mailbox.num_messages:
                return 0
            return seq_num

    def encode_seq_num(self, seq_num: int) -> int:
        """Convert a sequence number from the server view to the client view.

        Returns 0 if the message does not exist for the client.
        """
        if seq_num == 0:
            return 0
        mailbox = self._require_mailbox()
        with self._lock:
            if seq_num > mailbox.num_messages:
                return 0
            for update in reversed(self._queue):
                # Increments of more than one message are not accounted for.
                if update.num_messages and seq_num == update.num_messages:
                    return 0
                if update.expunge and seq_num >= update.expunge:
                    seq_num += 1
            return seq_num