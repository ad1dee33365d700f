"""Readers that supply :class:`~card_sort.models.Session` records.

Analysis helpers never reach for a global database handle. Callers construct
one of the sources below (or any object satisfying :class:`SessionSource`)
and pass the loaded sessions in explicitly:

- :class:`JsonSessionSource` reads session payloads exported from the sorting
  tool's ``GET /sessions/:id`` endpoint, one JSON file per session.
- :class:`SqliteSessionSource` reads the tool's SQLite database directly,
  read-only, and reassembles sessions the same way the endpoint does.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from tqdm import tqdm

from card_sort.models import Card, Category, Session, SessionId
from utils.schema import (
    CARD_ID_KEY,
    CARD_TEXT_KEY,
    CARD_TITLE_KEY,
    CATEGORY_CARDS_KEY,
    CATEGORY_ID_KEY,
    CATEGORY_NAME_KEY,
    SESSION_CATEGORIES_KEY,
    SESSION_ID_KEY,
    SESSION_NAME_KEY,
    SESSION_UNSORTED_KEY,
    TABLE_CATEGORIES,
    TABLE_SESSION_CARDS,
    TABLE_SESSIONS,
)

LOGGER = logging.getLogger(__name__)


class SessionLoadError(Exception):
    """Raised when a session cannot be read from its backing store."""


class SessionFormatError(ValueError):
    """Raised when a session payload does not have the expected structure."""


class SessionSource(Protocol):
    """Anything that can enumerate and load sorting sessions."""

    def list_session_ids(self) -> List[SessionId]: ...

    def load_session(self, session_id: SessionId) -> Session: ...

    def load_sessions(
        self,
        session_ids: Optional[Sequence[SessionId]] = None,
        *,
        show_progress: bool = False,
    ) -> List[Session]: ...


def _parse_card(raw: object, *, context: str) -> Card:
    if not isinstance(raw, Mapping):
        raise SessionFormatError(f"{context}: card entries must be objects")
    title = raw.get(CARD_TITLE_KEY)
    if not isinstance(title, str):
        raise SessionFormatError(f"{context}: card is missing a string title")
    card_id = raw.get(CARD_ID_KEY)
    text = raw.get(CARD_TEXT_KEY)
    return Card(
        title=title,
        card_id=card_id if isinstance(card_id, int) else None,
        text=text if isinstance(text, str) else None,
    )


def _parse_cards(raw_cards: object, *, context: str) -> tuple[Card, ...]:
    if not isinstance(raw_cards, list):
        raise SessionFormatError(f"{context}: card list must be an array")
    return tuple(_parse_card(item, context=context) for item in raw_cards)


def parse_session_payload(payload: Mapping[str, object]) -> Session:
    """Return a :class:`Session` built from an exported session payload.

    Parameters
    ----------
    payload:
        Mapping in the sorting tool's session shape. ``categories`` may be
        either an object keyed by category id (as served by the tool) or a
        plain list of category objects. ``unsortedCards`` is optional.

    Returns
    -------
    Session
        Immutable session record preserving category and card order.

    Raises
    ------
    SessionFormatError
        If a category lacks a card list, a card lacks a string title, or the
        top-level structure is not an object.
    """

    if not isinstance(payload, Mapping):
        raise SessionFormatError("Session payload must be a JSON object")

    session_id = payload.get(SESSION_ID_KEY)
    context = f"session {session_id}" if session_id is not None else "session"

    raw_categories = payload.get(SESSION_CATEGORIES_KEY) or []
    if isinstance(raw_categories, Mapping):
        category_items: Iterable[object] = raw_categories.values()
    elif isinstance(raw_categories, list):
        category_items = raw_categories
    else:
        raise SessionFormatError(f"{context}: categories must be an object or array")

    categories: List[Category] = []
    for raw in category_items:
        if not isinstance(raw, Mapping):
            raise SessionFormatError(f"{context}: category entries must be objects")
        name = raw.get(CATEGORY_NAME_KEY)
        if not isinstance(name, str):
            raise SessionFormatError(f"{context}: category is missing a name")
        category_id = raw.get(CATEGORY_ID_KEY)
        categories.append(
            Category(
                name=name,
                cards=_parse_cards(
                    raw.get(CATEGORY_CARDS_KEY),
                    context=f"{context}, category {name!r}",
                ),
                category_id=category_id if isinstance(category_id, int) else None,
            )
        )

    unsorted = _parse_cards(
        payload.get(SESSION_UNSORTED_KEY) or [], context=f"{context}, unsorted"
    )
    name = payload.get(SESSION_NAME_KEY)
    return Session(
        categories=tuple(categories),
        unsorted_cards=unsorted,
        session_id=session_id if isinstance(session_id, (int, str)) else None,
        name=name if isinstance(name, str) else None,
    )


class JsonSessionSource:
    """Load sessions from a directory of exported ``*.json`` payloads.

    Session ids are file stems; files are enumerated in name order.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory).expanduser().resolve()

    def list_session_ids(self) -> List[SessionId]:
        if not self.directory.is_dir():
            raise SessionLoadError(f"Session directory not found: {self.directory}")
        return [path.stem for path in sorted(self.directory.glob("*.json"))]

    def load_session(self, session_id: SessionId) -> Session:
        path = self.directory / f"{session_id}.json"
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as err:
            raise SessionLoadError(f"Failed to read session {path}: {err}") from err
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as err:
            raise SessionLoadError(
                f"Failed to parse session {path} as JSON: {err}"
            ) from err

        session = parse_session_payload(payload)
        if session.session_id is None:
            session = Session(
                categories=session.categories,
                unsorted_cards=session.unsorted_cards,
                session_id=str(session_id),
                name=session.name,
            )
        LOGGER.debug(
            "Loaded session %s from %s (%d cards)",
            session.session_id,
            path,
            session.card_count,
        )
        return session

    def load_sessions(
        self,
        session_ids: Optional[Sequence[SessionId]] = None,
        *,
        show_progress: bool = False,
    ) -> List[Session]:
        return _load_all(self, session_ids, show_progress=show_progress)


class SqliteSessionSource:
    """Load sessions from the sorting tool's SQLite database (read-only).

    Parameters
    ----------
    path:
        Location of the ``database.sqlite`` file.
    created_by:
        Optional user id; when set only sessions created by that user are
        listed or loaded, mirroring the tool's per-researcher session access.
    """

    def __init__(self, path: Path, *, created_by: Optional[int] = None) -> None:
        self.path = Path(path).expanduser().resolve()
        self.created_by = created_by

    def _connect(self) -> sqlite3.Connection:
        if not self.path.is_file():
            raise SessionLoadError(f"Database not found: {self.path}")
        try:
            conn = sqlite3.connect(f"{self.path.as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as err:
            raise SessionLoadError(f"Failed to open {self.path}: {err}") from err
        conn.row_factory = sqlite3.Row
        return conn

    def list_session_ids(self) -> List[SessionId]:
        query = f"SELECT id FROM {TABLE_SESSIONS}"
        params: tuple = ()
        if self.created_by is not None:
            query += " WHERE created_by = ?"
            params = (self.created_by,)
        query += " ORDER BY id"
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute(query, params).fetchall()
        except sqlite3.Error as err:
            raise SessionLoadError(f"Failed to list sessions: {err}") from err
        return [row["id"] for row in rows]

    def load_session(self, session_id: SessionId) -> Session:
        query = f"SELECT id, name FROM {TABLE_SESSIONS} WHERE id = ?"
        params: tuple = (session_id,)
        if self.created_by is not None:
            query += " AND created_by = ?"
            params += (self.created_by,)
        try:
            with closing(self._connect()) as conn:
                session_row = conn.execute(query, params).fetchone()
                if session_row is None:
                    raise SessionLoadError(f"Session not found: {session_id}")
                category_rows = conn.execute(
                    f"SELECT id, name FROM {TABLE_CATEGORIES} "
                    "WHERE session_id = ? ORDER BY id",
                    (session_id,),
                ).fetchall()
                card_rows = conn.execute(
                    "SELECT card_id, title, text, category_id "
                    f"FROM {TABLE_SESSION_CARDS} WHERE session_id = ? ORDER BY rowid",
                    (session_id,),
                ).fetchall()
        except sqlite3.Error as err:
            raise SessionLoadError(
                f"Failed to load session {session_id}: {err}"
            ) from err

        names: Dict[int, str] = {row["id"]: row["name"] for row in category_rows}
        cards_by_category: Dict[int, List[Card]] = {cid: [] for cid in names}
        unsorted: List[Card] = []
        seen_ids: set = set()
        for row in card_rows:
            card_id = row["card_id"]
            if card_id is None or card_id in seen_ids:
                continue
            seen_ids.add(card_id)
            card = Card(title=row["title"] or "", card_id=card_id, text=row["text"])
            category_id = row["category_id"]
            if category_id is None or category_id not in names:
                unsorted.append(card)
            else:
                cards_by_category[category_id].append(card)

        categories = tuple(
            Category(name=names[cid], cards=tuple(cards), category_id=cid)
            for cid, cards in cards_by_category.items()
        )
        LOGGER.debug(
            "Loaded session %s: %d categories, %d unsorted cards",
            session_id,
            len(categories),
            len(unsorted),
        )
        return Session(
            categories=categories,
            unsorted_cards=tuple(unsorted),
            session_id=session_row["id"],
            name=session_row["name"],
        )

    def load_sessions(
        self,
        session_ids: Optional[Sequence[SessionId]] = None,
        *,
        show_progress: bool = False,
    ) -> List[Session]:
        return _load_all(self, session_ids, show_progress=show_progress)


def _load_all(
    source: SessionSource,
    session_ids: Optional[Sequence[SessionId]],
    *,
    show_progress: bool,
) -> List[Session]:
    """Load ``session_ids`` (or every listed session) in order.

    Repeated ids are loaded once so each session counts a single time.
    """

    if session_ids is None:
        ids = source.list_session_ids()
    else:
        ids = list(dict.fromkeys(session_ids))
        if len(ids) < len(session_ids):
            LOGGER.warning(
                "Ignoring %d repeated session id(s)", len(session_ids) - len(ids)
            )
    iterator = tqdm(ids, desc="Sessions", unit="session") if show_progress else ids
    sessions = [source.load_session(session_id) for session_id in iterator]
    LOGGER.info("Loaded %d sessions", len(sessions))
    return sessions


__all__ = [
    "JsonSessionSource",
    "SessionFormatError",
    "SessionLoadError",
    "SessionSource",
    "SqliteSessionSource",
    "parse_session_payload",
]
