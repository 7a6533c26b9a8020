"""Async client for the record store REST API (Airtable-compatible)."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..errors import BackendHTTPError, ConfigurationError, ResponseShapeError, redact
from .models import (
    TEXT_FIELD_TYPES,
    BaseSchema,
    DeletedRecordList,
    Field,
    ListBasesResponse,
    Record,
    RecordList,
    RecordPage,
    Table,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_BASE_URL = "https://api.airtable.com"

_STATUS_HINTS = {
    401: "the API key is invalid or expired",
    403: "the API key lacks access to this base or the required scopes",
    404: "check the base, table and record identifiers",
    422: "the request body or formula was rejected by the API",
    429: "rate limited; retry after a short pause",
}


def escape_formula_string(value: str) -> str:
    """Escape *value* for use inside a double-quoted formula string literal."""

    return value.replace("\\", "\\\\").replace('"', '\\"')


def build_search_formula(term: str, field_names: Sequence[str]) -> str:
    escaped = escape_formula_string(term)
    # ``"" & {Field}`` coerces lookups and arrays to text so FIND works on them.
    clauses = [f'FIND("{escaped}", "" & {{{name}}})' for name in field_names]
    return f"OR({','.join(clauses)})"


class RecordStoreClient:
    """Thin wrapper over the REST API returning validated pydantic models."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = (api_key or "").strip()
        if not self.api_key:
            raise ConfigurationError(
                "No API key provided. Set it in the `TABLESTORE_API_KEY` environment variable"
            )
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def __repr__(self) -> str:
        return f"RecordStoreClient(base_url={self.base_url!r})"

    # ---------------------------
    # Bases and schema
    # ---------------------------

    async def list_bases(self) -> ListBasesResponse:
        bases = []
        offset: Optional[str] = None
        while True:
            params = {"offset": offset} if offset else None
            page = await self._request("GET", "/v0/meta/bases", ListBasesResponse, params=params)
            bases.extend(page.bases)
            offset = page.offset
            if not offset:
                break
        return ListBasesResponse(bases=bases)

    async def get_base_schema(self, base_id: str) -> BaseSchema:
        return await self._request("GET", f"/v0/meta/bases/{base_id}/tables", BaseSchema)

    async def create_table(
        self,
        base_id: str,
        name: str,
        fields: List[Dict[str, Any]],
        description: Optional[str] = None,
    ) -> Table:
        body: Dict[str, Any] = {"name": name, "fields": fields}
        if description is not None:
            body["description"] = description
        return await self._request("POST", f"/v0/meta/bases/{base_id}/tables", Table, json_body=body)

    async def update_table(self, base_id: str, table_id: str, updates: Dict[str, Any]) -> Table:
        return await self._request(
            "PATCH",
            f"/v0/meta/bases/{base_id}/tables/{table_id}",
            Table,
            json_body=_drop_none(updates),
        )

    async def create_field(self, base_id: str, table_id: str, field: Dict[str, Any]) -> Field:
        return await self._request(
            "POST",
            f"/v0/meta/bases/{base_id}/tables/{table_id}/fields",
            Field,
            json_body=_drop_none(field),
        )

    async def update_field(
        self,
        base_id: str,
        table_id: str,
        field_id: str,
        updates: Dict[str, Any],
    ) -> Field:
        return await self._request(
            "PATCH",
            f"/v0/meta/bases/{base_id}/tables/{table_id}/fields/{field_id}",
            Field,
            json_body=_drop_none(updates),
        )

    # ---------------------------
    # Records
    # ---------------------------

    async def list_records(
        self,
        base_id: str,
        table_id: str,
        *,
        view: Optional[str] = None,
        max_records: Optional[int] = None,
        filter_by_formula: Optional[str] = None,
        sort: Optional[Sequence[Dict[str, str]]] = None,
    ) -> List[Record]:
        """Return every record matching the options, following ``offset`` pages."""

        records: List[Record] = []
        offset: Optional[str] = None
        while True:
            params: List[tuple[str, str]] = []
            if max_records:
                params.append(("maxRecords", str(max_records)))
            if filter_by_formula:
                params.append(("filterByFormula", filter_by_formula))
            if view:
                params.append(("view", view))
            if offset:
                params.append(("offset", offset))
            for index, option in enumerate(sort or []):
                params.append((f"sort[{index}][field]", option["field"]))
                if option.get("direction"):
                    params.append((f"sort[{index}][direction]", option["direction"]))
            page = await self._request("GET", f"/v0/{base_id}/{table_id}", RecordPage, params=params)
            records.extend(page.records)
            offset = page.offset
            if not offset:
                break
        return records

    async def get_record(self, base_id: str, table_id: str, record_id: str) -> Record:
        return await self._request("GET", f"/v0/{base_id}/{table_id}/{record_id}", Record)

    async def create_record(self, base_id: str, table_id: str, fields: Dict[str, Any]) -> Record:
        return await self._request(
            "POST", f"/v0/{base_id}/{table_id}", Record, json_body={"fields": fields}
        )

    async def update_records(
        self,
        base_id: str,
        table_id: str,
        records: List[Dict[str, Any]],
    ) -> List[Record]:
        response = await self._request(
            "PATCH", f"/v0/{base_id}/{table_id}", RecordList, json_body={"records": records}
        )
        return response.records

    async def delete_records(self, base_id: str, table_id: str, record_ids: List[str]) -> List[str]:
        params = [("records[]", record_id) for record_id in record_ids]
        response = await self._request(
            "DELETE", f"/v0/{base_id}/{table_id}", DeletedRecordList, params=params
        )
        return [record.id for record in response.records]

    async def search_records(
        self,
        base_id: str,
        table_id: str,
        term: str,
        field_names: Optional[Sequence[str]] = None,
        max_records: Optional[int] = None,
        view: Optional[str] = None,
    ) -> List[Record]:
        search_fields = await self.validate_search_fields(base_id, table_id, field_names)
        formula = build_search_formula(term, search_fields)
        return await self.list_records(
            base_id,
            table_id,
            view=view,
            max_records=max_records,
            filter_by_formula=formula,
        )

    async def validate_search_fields(
        self,
        base_id: str,
        table_id: str,
        requested: Optional[Sequence[str]] = None,
    ) -> List[str]:
        """Return the field names to search, rejecting non-text fields."""

        schema = await self.get_base_schema(base_id)
        table = schema.find_table(table_id)
        if table is None:
            raise ValueError(f"Table {table_id} not found in base {base_id}")
        searchable = [field.name for field in table.fields if field.type in TEXT_FIELD_TYPES]
        if not searchable:
            raise ValueError("No text fields available to search")
        if requested:
            invalid = [name for name in requested if name not in searchable]
            if invalid:
                raise ValueError(f"Invalid fields requested: {', '.join(invalid)}")
            return list(requested)
        return searchable

    # ---------------------------
    # HTTP plumbing
    # ---------------------------

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        model: Type[ModelT],
        *,
        params: Any = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> ModelT:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            trust_env=False,
        ) as client:
            response = await client.request(
                method,
                path,
                params=params,
                content=json.dumps(json_body) if json_body is not None else None,
                headers=self._headers(),
            )
        text = response.text
        if response.is_error:
            body = redact(text, self.api_key)
            logger.warning("%s %s failed with %s", method, path, response.status_code)
            raise BackendHTTPError(
                response.status_code,
                response.reason_phrase,
                body,
                hint=_STATUS_HINTS.get(response.status_code, ""),
            )
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ResponseShapeError(f"Failed to parse API response: {exc}") from exc
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise ResponseShapeError(
                f"Failed to parse API response: {redact(str(exc), self.api_key)}"
            ) from exc


def _drop_none(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


__all__ = [
    "DEFAULT_BASE_URL",
    "RecordStoreClient",
    "build_search_formula",
    "escape_formula_string",
]
