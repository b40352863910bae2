"""
Site repository
Typed JSON access to the site, period, event and settings documents

Key layout:
    sites/{site}.json                     -> {users, events, app}
    sites/{site}/periods/{year}.json      -> {year, site, periods, lastUpdated}
    sites/{site}/events/{userId}.json     -> [Event]
    sites/{site}/settings/{userId}.json   -> {availability, availabilityExceptions, ...}
"""
import copy
import json
import logging
import re
from typing import Any, Callable, Optional, Tuple

from roster.error_handlers.exceptions import (
    ConcurrentModificationException,
    ResourceNotFoundException,
    StorageException,
    ValidationException,
)
from .base import DocumentStore

logger = logging.getLogger(__name__)

_SEGMENT_PATTERN = re.compile(r'^[A-Za-z0-9_.@-]+$')


def _segment(value: Any, name: str) -> str:
    text = str(value)
    if not _SEGMENT_PATTERN.match(text) or text in ('.', '..'):
        raise ValidationException(f"Invalid {name}: {text!r}")
    return text


def site_key(site: str) -> str:
    return f"sites/{_segment(site, 'site')}.json"


def periods_key(site: str, year: int) -> str:
    return f"sites/{_segment(site, 'site')}/periods/{int(year)}.json"


def events_key(site: str, user_id: str) -> str:
    return f"sites/{_segment(site, 'site')}/events/{_segment(user_id, 'user id')}.json"


def settings_key(site: str, user_id: str) -> str:
    return f"sites/{_segment(site, 'site')}/settings/{_segment(user_id, 'user id')}.json"


def dump_json(data: Any) -> str:
    return json.dumps(data, indent=2)


class SiteRepository:
    """
    JSON document access for one document store

    Every read-modify-write goes through ``update_json``: read the document
    and its version, apply the change, then write with a compare-and-swap on
    that version. A lost race is retried from a fresh read.
    """

    def __init__(self, store: DocumentStore, retries: int = 3):
        self.store = store
        self.retries = max(1, retries)

    # ------------------------------------------------------------------
    # Generic JSON documents
    # ------------------------------------------------------------------

    def read_versioned(self, key: str, default: Any) -> Tuple[Any, int]:
        """
        Read a JSON document with its version.

        Missing documents return a copy of ``default`` and version 0.

        Raises:
            StorageException: If the stored text is not valid JSON
        """
        doc = self.store.read(key)
        if doc is None:
            return copy.deepcopy(default), 0
        try:
            return json.loads(doc.content), doc.version
        except json.JSONDecodeError as e:
            raise StorageException(f"Stored document {key} is not valid JSON: {e}")

    def read_json(self, key: str, default: Any) -> Any:
        data, _ = self.read_versioned(key, default)
        return data

    def write_json(self, key: str, data: Any, expected_version: Optional[int] = None) -> None:
        self.store.write(key, dump_json(data), expected_version=expected_version)

    def update_json(self, key: str, mutator: Callable[[Any], Any], default: Any) -> Any:
        """
        Read, mutate and conditionally write a JSON document.

        Args:
            key: Storage key
            mutator: Called with the decoded document; mutates it in place and
                may return a value for the caller
            default: Document used when the key does not exist yet

        Returns:
            Whatever the mutator returned

        Raises:
            ConcurrentModificationException: If every attempt lost a race
        """
        last_error = None
        for attempt in range(1, self.retries + 1):
            doc = self.store.read(key)
            if doc is None:
                data, version, original = copy.deepcopy(default), 0, None
            else:
                try:
                    data = json.loads(doc.content)
                except json.JSONDecodeError as e:
                    raise StorageException(f"Stored document {key} is not valid JSON: {e}")
                version, original = doc.version, doc.content

            result = mutator(data)
            content = dump_json(data)
            if original is not None and content == original:
                return result

            try:
                self.store.write(key, content, expected_version=version)
                return result
            except ConcurrentModificationException as e:
                last_error = e
                logger.warning(f"Retrying update of {key} after conflict (attempt {attempt}/{self.retries})")

        raise last_error

    # ------------------------------------------------------------------
    # Site documents
    # ------------------------------------------------------------------

    def read_site(self, site: str) -> dict:
        """
        Raises:
            ResourceNotFoundException: If the site document does not exist
        """
        key = site_key(site)
        doc = self.store.read(key)
        if doc is None:
            raise ResourceNotFoundException(f"Site {site} not found")
        try:
            data = json.loads(doc.content)
        except json.JSONDecodeError as e:
            raise StorageException(f"Stored document {key} is not valid JSON: {e}")
        data.setdefault('users', [])
        data.setdefault('events', [])
        data.setdefault('app', {})
        return data

    def update_site(self, site: str, mutator: Callable[[dict], Any]) -> Any:
        key = site_key(site)
        if not self.store.exists(key):
            raise ResourceNotFoundException(f"Site {site} not found")
        return self.update_json(key, mutator, default={'users': [], 'events': []})

    def find_user(self, site: str, user_id: str) -> dict:
        """
        Raises:
            ResourceNotFoundException: If the site or user does not exist
        """
        site_data = self.read_site(site)
        for user in site_data['users']:
            if user.get('id') == user_id:
                return user
        raise ResourceNotFoundException(f"User {user_id} not found")

    def read_periods(self, site: str, year: int) -> dict:
        return self.read_json(periods_key(site, year), default={
            'year': int(year),
            'site': site,
            'periods': [],
            'lastUpdated': None,
        })

    def write_periods(self, site: str, year: int, periods_data: dict) -> None:
        # Full replacement of the year's document, not a read-modify-write
        self.write_json(periods_key(site, year), periods_data)

    def read_user_events(self, site: str, user_id: str) -> list:
        events = self.read_json(events_key(site, user_id), default=[])
        if not isinstance(events, list):
            raise StorageException(f"Events document for user {user_id} is not a list")
        return events

    def write_user_events(self, site: str, user_id: str, events: list) -> None:
        self.write_json(events_key(site, user_id), events)

    def read_user_settings(self, site: str, user_id: str) -> dict:
        settings = self.read_json(settings_key(site, user_id), default={})
        return settings if isinstance(settings, dict) else {}

    def update_user_settings(self, site: str, user_id: str, mutator: Callable[[dict], Any]) -> Any:
        return self.update_json(settings_key(site, user_id), mutator, default={})
