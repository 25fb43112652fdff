"""Google provider: implements DocumentStoreProvider using the Docs v1 and Drive v3 REST APIs."""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from urllib.parse import quote

import httpx
import structlog

from modules.google_docs.auth import GoogleCredentials
from modules.google_docs.providers.base import DocumentStoreProvider
from shared.errors import ProviderError

logger = structlog.get_logger()

DOCS_API = "https://docs.googleapis.com/v1"
DRIVE_API = "https://www.googleapis.com/drive/v3"
UPLOAD_API = "https://www.googleapis.com/upload/drive/v3"

GOOGLE_DOC = "application/vnd.google-apps.document"
GOOGLE_SHEET = "application/vnd.google-apps.spreadsheet"
GOOGLE_SLIDES = "application/vnd.google-apps.presentation"
GOOGLE_FOLDER = "application/vnd.google-apps.folder"

_FILE_FIELDS = "id,name,mimeType,webViewLink"
_DEFAULT_GET_FIELDS = "id,name,mimeType,createdTime,modifiedTime,size,webViewLink,parents,permissions,owners"
_REVISION_FIELDS = "id,modifiedTime,size,keepForever,published,exportLinks"


def _doc_url(document_id: str) -> str:
    return f"https://docs.google.com/document/d/{document_id}/edit"


def _compact(data: dict) -> dict:
    """Drop keys whose value is None."""
    return {k: v for k, v in data.items() if v is not None}


def _pick(data: dict, *keys: str) -> dict:
    return _compact({k: data.get(k) for k in keys})


def _require(value, name: str):
    if value is None or value == "":
        raise ProviderError(f"Missing required argument: {name}")
    return value


def _seg(value: str) -> str:
    """Quote a path segment."""
    return quote(str(value), safe="")


def _escape_query(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _multipart_related(metadata: dict, content: str, mime_type: str) -> tuple[bytes, str]:
    """Build a ``multipart/related`` body for Drive uploads."""
    boundary = uuid.uuid4().hex
    body = (
        f"--{boundary}\r\n"
        "Content-Type: application/json; charset=UTF-8\r\n\r\n"
        f"{json.dumps(metadata)}\r\n"
        f"--{boundary}\r\n"
        f"Content-Type: {mime_type}\r\n\r\n"
        f"{content}\r\n"
        f"--{boundary}--\r\n"
    )
    return body.encode("utf-8"), f"multipart/related; boundary={boundary}"


def _document_text(document: dict) -> str | None:
    """Concatenate paragraph text runs, one line per structural element."""
    body = document.get("body")
    if body is None:
        return None
    lines = []
    for item in body.get("content", []):
        paragraph = item.get("paragraph") or {}
        lines.append("".join(
            (el.get("textRun") or {}).get("content", "") for el in paragraph.get("elements", [])
        ))
    return "\n".join(lines)


class GoogleWorkspaceProvider(DocumentStoreProvider):
    """Google Docs / Drive REST provider."""

    def __init__(
        self,
        credentials: GoogleCredentials,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.credentials = credentials
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _auth_headers(self) -> tuple[str, dict[str, str]]:
        token = await self.credentials.token(self._client)
        return token, {"Authorization": f"Bearer {token}"}

    async def _request(self, method: str, url: str, *, retry_auth: bool = True, **kwargs) -> dict:
        """Make an API request and return parsed JSON."""
        extra_headers = kwargs.pop("headers", {})
        token, auth = await self._auth_headers()
        headers = {**extra_headers, **auth}
        try:
            resp = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise ProviderError(f"Google API request failed: {e}") from e

        if resp.status_code == 401 and retry_auth and await self.credentials.force_refresh(self._client, token):
            logger.info("google_token_rejected_retrying", url=url)
            return await self._request(method, url, retry_auth=False, headers=extra_headers, **kwargs)
        if resp.status_code >= 400:
            raise ProviderError(_error_message(resp), status_code=resp.status_code)
        if resp.status_code == 204 or not resp.content:
            return {}
        return resp.json()

    async def _get(self, url: str, **params) -> dict:
        return await self._request("GET", url, params=_compact(params))

    async def _post(self, url: str, json: dict, **params) -> dict:
        return await self._request("POST", url, json=json, params=_compact(params))

    async def _patch(self, url: str, json: dict, **params) -> dict:
        return await self._request("PATCH", url, json=json, params=_compact(params))

    async def _delete(self, url: str) -> dict:
        return await self._request("DELETE", url)

    async def _upload(self, method: str, url: str, metadata: dict, content: str, mime_type: str, **params) -> dict:
        body, content_type = _multipart_related(metadata, content, mime_type)
        return await self._request(
            method,
            url,
            content=body,
            headers={"Content-Type": content_type},
            params={"uploadType": "multipart", **_compact(params)},
        )

    async def _download(self, url: str, dest: Path, params: dict, *, retry_auth: bool = True) -> None:
        """Stream a response body into ``dest``. Nothing is written on an error status."""
        token, headers = await self._auth_headers()
        rejected = False
        try:
            async with self._client.stream("GET", url, params=params, headers=headers) as resp:
                if resp.status_code == 401 and retry_auth and self.credentials.can_refresh:
                    await resp.aread()
                    rejected = True
                elif resp.status_code >= 400:
                    await resp.aread()
                    raise ProviderError(_error_message(resp), status_code=resp.status_code)
                else:
                    with dest.open("wb") as fh:
                        async for chunk in resp.aiter_bytes():
                            fh.write(chunk)
        except httpx.HTTPError as e:
            raise ProviderError(f"Google API request failed: {e}") from e
        except OSError as e:
            raise ProviderError(f"Could not write {dest}: {e.strerror or e}") from e

        if rejected:
            logger.info("google_token_rejected_retrying", url=url)
            await self.credentials.force_refresh(self._client, token)
            await self._download(url, dest, params, retry_auth=False)

    async def _batch_update(self, document_id: str, requests: list[dict]) -> dict:
        return await self._post(f"{DOCS_API}/documents/{_seg(document_id)}:batchUpdate", {"requests": requests})

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def docs_create_document(self, title: str | None) -> dict:
        data = await self._post(f"{DOCS_API}/documents", {"title": _require(title, "title")})
        return _compact({
            "documentId": data.get("documentId"),
            "title": data.get("title"),
            "url": _doc_url(data.get("documentId")),
        })

    async def docs_get_document(self, document_id: str | None) -> dict:
        _require(document_id, "documentId")
        data = await self._get(f"{DOCS_API}/documents/{_seg(document_id)}")
        return _compact({
            "documentId": data.get("documentId"),
            "title": data.get("title"),
            "content": _document_text(data),
        })

    async def docs_append_text(self, document_id: str | None, text: str | None) -> dict:
        _require(document_id, "documentId")
        await self._batch_update(document_id, [
            {"insertText": {"text": _require(text, "text"), "endOfSegmentLocation": {}}},
        ])
        return {"success": True, "documentId": document_id, "message": "Text appended successfully"}

    async def docs_replace_text(
        self, document_id: str | None, find_text: str | None, replace_with_text: str | None
    ) -> dict:
        _require(document_id, "documentId")
        await self._batch_update(document_id, [
            {
                "replaceAllText": {
                    "containsText": {"text": _require(find_text, "findText")},
                    "replaceText": replace_with_text or "",
                },
            },
        ])
        return {"success": True, "documentId": document_id, "message": "Text replaced successfully"}

    async def docs_list_documents(self, max_results: int = 10) -> dict:
        data = await self._get(
            f"{DRIVE_API}/files",
            q=f"mimeType='{GOOGLE_DOC}'",
            spaces="drive",
            fields="files(id, name, createdTime, modifiedTime)",
            pageSize=int(max_results),
        )
        files = data.get("files", [])
        return {
            "totalDocs": len(files),
            "documents": [
                _compact({
                    "documentId": f.get("id"),
                    "title": f.get("name"),
                    "createdTime": f.get("createdTime"),
                    "modifiedTime": f.get("modifiedTime"),
                    "url": _doc_url(f.get("id")),
                })
                for f in files
            ],
        }

    async def docs_delete_document(self, document_id: str | None) -> dict:
        await self._delete(f"{DRIVE_API}/files/{_seg(_require(document_id, 'documentId'))}")
        return {"success": True, "documentId": document_id, "message": "Document deleted successfully"}

    async def docs_export_pdf(self, document_id: str | None, output_path: str | None) -> dict:
        _require(document_id, "documentId")
        dest = Path(_require(output_path, "outputPath")).expanduser()
        await self._download(
            f"{DRIVE_API}/files/{_seg(document_id)}/export", dest, params={"mimeType": "application/pdf"}
        )
        logger.info("pdf_exported", document_id=document_id, path=str(dest))
        return {
            "success": True,
            "documentId": document_id,
            "outputPath": output_path,
            "message": "PDF exported successfully",
        }

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    async def drive_list_files(
        self,
        max_results: int = 50,
        mime_type: str | None = None,
        query: str | None = None,
        order_by: str = "modifiedTime desc",
    ) -> dict:
        search = "trashed=false"
        if mime_type:
            search += f" and mimeType='{_escape_query(mime_type)}'"
        if query:
            search += f" and name contains '{_escape_query(query)}'"

        data = await self._get(
            f"{DRIVE_API}/files",
            q=search,
            spaces="drive",
            fields="files(id, name, mimeType, createdTime, modifiedTime, size, webViewLink, parents)",
            pageSize=int(max_results),
            orderBy=order_by,
        )
        files = data.get("files", [])
        return {
            "totalFiles": len(files),
            "files": [
                {
                    **_pick(f, "id", "name", "mimeType", "createdTime", "modifiedTime", "size", "webViewLink", "parents"),
                    "isGoogleDoc": f.get("mimeType") == GOOGLE_DOC,
                    "isGoogleSheet": f.get("mimeType") == GOOGLE_SHEET,
                    "isGoogleSlide": f.get("mimeType") == GOOGLE_SLIDES,
                    "isFolder": f.get("mimeType") == GOOGLE_FOLDER,
                }
                for f in files
            ],
        }

    async def drive_get_file(self, file_id: str | None, fields: str | None = None) -> dict:
        data = await self._get(
            f"{DRIVE_API}/files/{_seg(_require(file_id, 'fileId'))}",
            fields=fields or _DEFAULT_GET_FIELDS,
        )
        return _pick(
            data, "id", "name", "mimeType", "createdTime", "modifiedTime", "size",
            "webViewLink", "parents", "permissions", "owners",
        )

    async def drive_create_file(
        self,
        name: str | None,
        mime_type: str | None,
        content: str | None = None,
        parents: list[str] | None = None,
    ) -> dict:
        metadata = _compact({"name": _require(name, "name"), "parents": parents})
        _require(mime_type, "mimeType")
        if content:
            data = await self._upload("POST", f"{UPLOAD_API}/files", metadata, content, mime_type, fields=_FILE_FIELDS)
        else:
            data = await self._post(f"{DRIVE_API}/files", {**metadata, "mimeType": mime_type}, fields=_FILE_FIELDS)
        return {**_pick(data, "id", "name", "mimeType", "webViewLink"), "message": "File created successfully"}

    async def drive_update_file(
        self,
        file_id: str | None,
        name: str | None = None,
        content: str | None = None,
        add_parents: list[str] | None = None,
        remove_parents: list[str] | None = None,
    ) -> dict:
        _require(file_id, "fileId")
        metadata = _compact({"name": name or None})
        params = {
            "fields": _FILE_FIELDS,
            "addParents": ",".join(add_parents) if add_parents else None,
            "removeParents": ",".join(remove_parents) if remove_parents else None,
        }
        if content:
            data = await self._upload(
                "PATCH", f"{UPLOAD_API}/files/{_seg(file_id)}", metadata, content, "text/plain", **params
            )
        else:
            data = await self._patch(f"{DRIVE_API}/files/{_seg(file_id)}", metadata, **params)
        return {**_pick(data, "id", "name", "mimeType", "webViewLink"), "message": "File updated successfully"}

    async def drive_delete_file(self, file_id: str | None) -> dict:
        await self._delete(f"{DRIVE_API}/files/{_seg(_require(file_id, 'fileId'))}")
        return {"fileId": file_id, "message": "File deleted successfully"}

    async def drive_copy_file(
        self, file_id: str | None, name: str | None = None, parents: list[str] | None = None
    ) -> dict:
        data = await self._post(
            f"{DRIVE_API}/files/{_seg(_require(file_id, 'fileId'))}/copy",
            _compact({"name": name or None, "parents": parents}),
            fields=_FILE_FIELDS,
        )
        return {**_pick(data, "id", "name", "mimeType", "webViewLink"), "message": "File copied successfully"}

    async def drive_move_file(
        self, file_id: str | None, add_parents: list[str] | None, remove_parents: list[str] | None
    ) -> dict:
        data = await self._patch(
            f"{DRIVE_API}/files/{_seg(_require(file_id, 'fileId'))}",
            {},
            addParents=",".join(_require(add_parents, "addParents")),
            removeParents=",".join(_require(remove_parents, "removeParents")),
            fields="id,name,parents",
        )
        return {**_pick(data, "id", "name", "parents"), "message": "File moved successfully"}

    # ------------------------------------------------------------------
    # Permissions
    # ------------------------------------------------------------------

    async def drive_list_permissions(self, file_id: str | None) -> dict:
        data = await self._get(
            f"{DRIVE_API}/files/{_seg(_require(file_id, 'fileId'))}/permissions",
            fields="permissions(id,type,role,emailAddress,displayName)",
        )
        return {
            "permissions": [
                _pick(p, "id", "type", "role", "emailAddress", "displayName")
                for p in data.get("permissions", [])
            ],
        }

    async def drive_create_permission(
        self,
        file_id: str | None,
        email_address: str | None,
        role: str | None,
        type: str | None,
    ) -> dict:
        permission = {"type": _require(type, "type"), "role": _require(role, "role")}
        if email_address and type in ("user", "group"):
            permission["emailAddress"] = email_address
        data = await self._post(
            f"{DRIVE_API}/files/{_seg(_require(file_id, 'fileId'))}/permissions",
            permission,
            fields="id,type,role,emailAddress",
        )
        return {**_pick(data, "id", "type", "role", "emailAddress"), "message": "Permission created successfully"}

    async def drive_delete_permission(self, file_id: str | None, permission_id: str | None) -> dict:
        _require(file_id, "fileId")
        await self._delete(
            f"{DRIVE_API}/files/{_seg(file_id)}/permissions/{_seg(_require(permission_id, 'permissionId'))}"
        )
        return {"fileId": file_id, "permissionId": permission_id, "message": "Permission deleted successfully"}

    # ------------------------------------------------------------------
    # Revisions
    # ------------------------------------------------------------------

    async def drive_list_revisions(self, file_id: str | None) -> dict:
        data = await self._get(
            f"{DRIVE_API}/files/{_seg(_require(file_id, 'fileId'))}/revisions",
            fields=f"revisions({_REVISION_FIELDS})",
        )
        return {
            "revisions": [
                _pick(r, *_REVISION_FIELDS.split(",")) for r in data.get("revisions", [])
            ],
        }

    async def drive_get_revision(self, file_id: str | None, revision_id: str | None) -> dict:
        _require(file_id, "fileId")
        data = await self._get(
            f"{DRIVE_API}/files/{_seg(file_id)}/revisions/{_seg(_require(revision_id, 'revisionId'))}",
            fields=_REVISION_FIELDS,
        )
        return _pick(data, *_REVISION_FIELDS.split(","))

    async def drive_delete_revision(self, file_id: str | None, revision_id: str | None) -> dict:
        _require(file_id, "fileId")
        await self._delete(f"{DRIVE_API}/files/{_seg(file_id)}/revisions/{_seg(_require(revision_id, 'revisionId'))}")
        return {"fileId": file_id, "revisionId": revision_id, "message": "Revision deleted successfully"}

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def drive_list_comments(self, file_id: str | None, max_results: int = 100) -> dict:
        data = await self._get(
            f"{DRIVE_API}/files/{_seg(_require(file_id, 'fileId'))}/comments",
            pageSize=int(max_results),
            fields="comments(id,content,createdTime,modifiedTime,author,quotedFileContent)",
        )
        return {
            "comments": [
                _pick(c, "id", "content", "createdTime", "modifiedTime", "author", "quotedFileContent")
                for c in data.get("comments", [])
            ],
        }

    async def drive_create_comment(
        self, file_id: str | None, content: str | None, quoted_file_content: str | None = None
    ) -> dict:
        comment: dict = {"content": _require(content, "content")}
        if quoted_file_content:
            comment["quotedFileContent"] = {"mimeType": "text/plain", "value": quoted_file_content}
        data = await self._post(
            f"{DRIVE_API}/files/{_seg(_require(file_id, 'fileId'))}/comments",
            comment,
            fields="id,content,createdTime,author",
        )
        return {**_pick(data, "id", "content", "createdTime", "author"), "message": "Comment created successfully"}

    async def drive_delete_comment(self, file_id: str | None, comment_id: str | None) -> dict:
        _require(file_id, "fileId")
        await self._delete(f"{DRIVE_API}/files/{_seg(file_id)}/comments/{_seg(_require(comment_id, 'commentId'))}")
        return {"fileId": file_id, "commentId": comment_id, "message": "Comment deleted successfully"}

    # ------------------------------------------------------------------
    # Replies
    # ------------------------------------------------------------------

    def _replies_url(self, file_id: str | None, comment_id: str | None) -> str:
        _require(file_id, "fileId")
        _require(comment_id, "commentId")
        return f"{DRIVE_API}/files/{_seg(file_id)}/comments/{_seg(comment_id)}/replies"

    async def drive_list_replies(self, file_id: str | None, comment_id: str | None) -> dict:
        data = await self._get(
            self._replies_url(file_id, comment_id),
            fields="replies(id,content,createdTime,modifiedTime,author)",
        )
        return {
            "replies": [
                _pick(r, "id", "content", "createdTime", "modifiedTime", "author")
                for r in data.get("replies", [])
            ],
        }

    async def drive_create_reply(self, file_id: str | None, comment_id: str | None, content: str | None) -> dict:
        data = await self._post(
            self._replies_url(file_id, comment_id),
            {"content": _require(content, "content")},
            fields="id,content,createdTime,author",
        )
        return {**_pick(data, "id", "content", "createdTime", "author"), "message": "Reply created successfully"}

    async def drive_delete_reply(
        self, file_id: str | None, comment_id: str | None, reply_id: str | None
    ) -> dict:
        url = self._replies_url(file_id, comment_id)
        await self._delete(f"{url}/{_seg(_require(reply_id, 'replyId'))}")
        return {
            "fileId": file_id,
            "commentId": comment_id,
            "replyId": reply_id,
            "message": "Reply deleted successfully",
        }

    async def close(self) -> None:
        await self._client.aclose()


def _error_message(resp: httpx.Response) -> str:
    """Pull Google's ``{"error": {"message": ...}}`` out of an error response."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if isinstance(error, str):
            return body.get("error_description") or error
    return f"Google API error {resp.status_code}: {resp.text[:500]}"
