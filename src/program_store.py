"""
Periodization Engine — Program Version Store

Persistence collaborator for the append-only ProgramVersion history.
The store, not the engine, guarantees exactly one active version per user:
rotate() deactivates the old row and activates the new one as one step,
and rolls back if the new row cannot be saved.
"""
import threading
import time
import uuid

import requests

from src.config import SUPABASE_URL, SUPABASE_SERVICE_KEY, PROGRAM_VERSIONS_TABLE
from src.models import ProgramVersion, StaleVersionError

MAX_RETRIES = 3
RETRY_BACKOFF = 2  # exponential backoff multiplier


class InMemoryProgramStore:
    """Process-local store. One lock serializes every write."""

    def __init__(self):
        self._rows: dict[str, ProgramVersion] = {}
        self._lock = threading.Lock()

    def get_active(self, user_id: str) -> ProgramVersion | None:
        for row in self._rows.values():
            if row.user_id == user_id and row.active:
                return row
        return None

    def history(self, user_id: str) -> list[ProgramVersion]:
        rows = [r for r in self._rows.values() if r.user_id == user_id]
        return sorted(rows, key=lambda r: r.version_number)

    def create_initial(self, user_id: str, program_data: dict, reason: str = "Initial program") -> ProgramVersion:
        with self._lock:
            if self.get_active(user_id) is not None:
                raise StaleVersionError(f"user {user_id} already has an active program")
            row = ProgramVersion(
                id=str(uuid.uuid4()),
                user_id=user_id,
                version_number=1,
                program_data=program_data,
                active=True,
                reason_for_change=reason,
                change_type="initial",
            )
            self._rows[row.id] = row
            return row

    def rotate(self, old: ProgramVersion, program_data: dict, change_type: str, reason: str) -> ProgramVersion:
        """Flip `old` inactive and insert its successor as the active version."""
        with self._lock:
            current = self.get_active(old.user_id)
            if current is None or current.id != old.id or current.version_number != old.version_number:
                raise StaleVersionError(
                    f"version {old.version_number} is no longer active for user {old.user_id}"
                )
            new = ProgramVersion(
                id=str(uuid.uuid4()),
                user_id=old.user_id,
                version_number=old.version_number + 1,
                program_data=program_data,
                active=True,
                reason_for_change=reason,
                change_type=change_type,
            )
            current.active = False
            self._rows[new.id] = new
            return new

    def patch_program_data(self, version: ProgramVersion, program_data: dict) -> ProgramVersion:
        """Overwrite program_data on the active version, same version number."""
        with self._lock:
            row = self._rows.get(version.id)
            if row is None or not row.active:
                raise StaleVersionError(f"version {version.id} is not the active version")
            row.program_data = program_data
            return row


class SupabaseProgramStore:
    """
    PostgREST-backed store (Supabase table ai_program_versions).

    rotate() is three requests: insert the new row inactive, deactivate the
    old row only while it is still active, activate the new row. Each failure
    undoes the earlier steps so the old row stays the active one.
    """

    def __init__(self, url: str = SUPABASE_URL, key: str = SUPABASE_SERVICE_KEY,
                 table: str = PROGRAM_VERSIONS_TABLE, timeout: int = 15):
        self.base_url = f"{url.rstrip('/')}/rest/v1/{table}"
        self.timeout = timeout
        self.headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    def _request(self, method: str, params: dict = None, body=None) -> list[dict]:
        """Request with retry on 429/5xx/timeouts."""
        for attempt in range(1, MAX_RETRIES + 1):
            try:
                r = requests.request(
                    method, self.base_url, headers=self.headers,
                    params=params or {}, json=body, timeout=self.timeout,
                )
                if r.status_code == 429:
                    wait = RETRY_BACKOFF ** attempt
                    print(f"  ⏳ Supabase rate limit, retrying in {wait}s (attempt {attempt}/{MAX_RETRIES})")
                    time.sleep(wait)
                    continue
                r.raise_for_status()
                return r.json() if r.content else []
            except requests.exceptions.Timeout:
                if attempt < MAX_RETRIES:
                    print(f"  ⏳ Supabase timeout, retrying (attempt {attempt}/{MAX_RETRIES})")
                    time.sleep(RETRY_BACKOFF ** attempt)
                else:
                    raise
            except requests.exceptions.HTTPError:
                if attempt < MAX_RETRIES and r.status_code >= 500:
                    print(f"  ⏳ Supabase {r.status_code}, retrying (attempt {attempt}/{MAX_RETRIES})")
                    time.sleep(RETRY_BACKOFF ** attempt)
                else:
                    raise
        raise requests.exceptions.RetryError(f"Supabase failed after {MAX_RETRIES} attempts")

    def get_active(self, user_id: str) -> ProgramVersion | None:
        rows = self._request("GET", params={
            "user_id": f"eq.{user_id}",
            "active": "is.true",
            "order": "version_number.desc",
            "limit": 1,
        })
        return ProgramVersion.from_record(rows[0]) if rows else None

    def history(self, user_id: str) -> list[ProgramVersion]:
        rows = self._request("GET", params={
            "user_id": f"eq.{user_id}",
            "order": "version_number.asc",
        })
        return [ProgramVersion.from_record(r) for r in rows]

    def create_initial(self, user_id: str, program_data: dict, reason: str = "Initial program") -> ProgramVersion:
        if self.get_active(user_id) is not None:
            raise StaleVersionError(f"user {user_id} already has an active program")
        rows = self._request("POST", body={
            "user_id": user_id,
            "version_number": 1,
            "program_data": program_data,
            "active": True,
            "reason_for_change": reason,
            "change_type": "initial",
        })
        return ProgramVersion.from_record(rows[0])

    def rotate(self, old: ProgramVersion, program_data: dict, change_type: str, reason: str) -> ProgramVersion:
        inserted = self._request("POST", body={
            "user_id": old.user_id,
            "version_number": old.version_number + 1,
            "program_data": program_data,
            "active": False,
            "reason_for_change": reason,
            "change_type": change_type,
        })
        new = ProgramVersion.from_record(inserted[0])

        try:
            deactivated = self._request("PATCH", params={
                "id": f"eq.{old.id}",
                "active": "is.true",
                "version_number": f"eq.{old.version_number}",
            }, body={"active": False})
        except requests.exceptions.RequestException:
            self._request("DELETE", params={"id": f"eq.{new.id}"})
            raise
        if not deactivated:
            # Someone else already moved the active version on
            self._request("DELETE", params={"id": f"eq.{new.id}"})
            raise StaleVersionError(
                f"version {old.version_number} is no longer active for user {old.user_id}"
            )

        try:
            activated = self._request("PATCH", params={"id": f"eq.{new.id}"}, body={"active": True})
        except requests.exceptions.RequestException:
            self._request("PATCH", params={"id": f"eq.{old.id}"}, body={"active": True})
            self._request("DELETE", params={"id": f"eq.{new.id}"})
            raise
        return ProgramVersion.from_record(activated[0]) if activated else new

    def patch_program_data(self, version: ProgramVersion, program_data: dict) -> ProgramVersion:
        rows = self._request("PATCH", params={
            "id": f"eq.{version.id}",
            "active": "is.true",
        }, body={"program_data": program_data})
        if not rows:
            raise StaleVersionError(f"version {version.id} is not the active version")
        return ProgramVersion.from_record(rows[0])
