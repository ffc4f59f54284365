"""
Outbound request construction for scenario endpoint calls.

Each inbound request produces exactly one outbound encoding:

- multipart, when the caller attached at least one file; every scalar form
  field and every file part is carried over under its original field name
  and filename, repeated names included. Values sharing a name keep their
  inbound order; scalar fields are grouped by name and precede the files;
- passthrough otherwise; the inbound body bytes and content type are
  forwarded untouched (JSON, urlencoded or file-less multipart).

Query parameters are always forwarded, minus the gateway's own ``token``
credential. For clustered routes the routing hint is written into the query
and never into the body.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from fastapi import Request
from starlette.datastructures import UploadFile

from shared.logging import get_logger, get_request_id
from ..auth.tokens import TOKEN_QUERY_PARAM
from ..routing.action_router import Route


MULTIPART_CONTENT_TYPE = "multipart/form-data"


@dataclass(frozen=True)
class FileAttachment:
    """A file part taken from the inbound multipart body."""

    field_name: str
    filename: str
    content: bytes
    content_type: Optional[str] = None


@dataclass
class OutboundRequest:
    """Everything needed to call a scenario endpoint once."""

    method: str
    url: str
    params: List[Tuple[str, str]] = field(default_factory=list)
    headers: Dict[str, str] = field(default_factory=dict)
    content: Optional[bytes] = None
    form_fields: List[Tuple[str, str]] = field(default_factory=list)
    files: List[FileAttachment] = field(default_factory=list)

    @property
    def is_multipart(self) -> bool:
        return bool(self.files)

    def httpx_kwargs(self) -> Dict[str, object]:
        """Keyword arguments for ``httpx.AsyncClient.request``."""
        kwargs: Dict[str, object] = {
            "method": self.method,
            "url": self.url,
            "params": self.params,
            "headers": self.headers,
        }
        if self.is_multipart:
            data: Dict[str, List[str]] = {}
            for name, value in self.form_fields:
                data.setdefault(name, []).append(value)
            kwargs["data"] = data
            kwargs["files"] = [
                (f.field_name, (f.filename, f.content, f.content_type or "application/octet-stream"))
                for f in self.files
            ]
        elif self.content is not None:
            kwargs["content"] = self.content
        return kwargs


class RequestTransformer:
    """Builds the outbound request for a resolved route."""

    def __init__(self, routing_hint_param: str = "action"):
        self.routing_hint_param = routing_hint_param
        self.logger = get_logger("gateway.transformer")

    async def build(self, request: Request, route: Route) -> OutboundRequest:
        """Translate the inbound request into a scenario endpoint call."""
        outbound = OutboundRequest(
            method=request.method,
            url=route.url,
            params=self.build_query(request.query_params.multi_items(), route),
        )

        request_id = get_request_id()
        if request_id:
            outbound.headers["X-Request-ID"] = request_id

        body = await request.body()
        content_type = request.headers.get("content-type", "")

        if content_type.lower().startswith(MULTIPART_CONTENT_TYPE):
            form_fields, files = await self._read_multipart(request)
            if files:
                outbound.form_fields = form_fields
                outbound.files = files
                self.logger.debug(
                    "Built multipart payload",
                    action=route.action,
                    fields=len(form_fields),
                    files=len(files),
                )
                return outbound

        if body:
            outbound.content = body
            if content_type:
                outbound.headers["Content-Type"] = content_type
        return outbound

    def build_query(self, items: List[Tuple[str, str]], route: Route) -> List[Tuple[str, str]]:
        """Forward caller query items, minus the credential, plus any routing hint."""
        params = [(key, value) for key, value in items if key != TOKEN_QUERY_PARAM]
        if route.routing_hint is not None:
            params = [(key, value) for key, value in params if key != self.routing_hint_param]
            params.append((self.routing_hint_param, route.routing_hint))
        return params

    async def _read_multipart(self, request: Request) -> Tuple[List[Tuple[str, str]], List[FileAttachment]]:
        form = await request.form()
        form_fields: List[Tuple[str, str]] = []
        files: List[FileAttachment] = []
        try:
            for name, value in form.multi_items():
                if isinstance(value, UploadFile):
                    files.append(FileAttachment(
                        field_name=name,
                        filename=value.filename or "",
                        content=await value.read(),
                        content_type=value.content_type,
                    ))
                else:
                    form_fields.append((name, value))
        finally:
            await form.close()
        return form_fields, files
