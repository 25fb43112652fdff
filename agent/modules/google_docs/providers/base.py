"""Base provider interface for the Google Docs module.

One coroutine per catalog entry, named after the tool, taking the tool's
arguments in snake_case. Parameters the caller left out arrive as ``None``
(or the schema default), so implementations check what they require.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class DocumentStoreProvider(ABC):
    """Abstract base class for document/file store backends."""

    # ---- Documents ----

    @abstractmethod
    async def docs_create_document(self, title: str | None) -> dict:
        """Create a new document."""

    @abstractmethod
    async def docs_get_document(self, document_id: str | None) -> dict:
        """Return a document's title and plain-text content."""

    @abstractmethod
    async def docs_append_text(self, document_id: str | None, text: str | None) -> dict:
        """Append text at the end of a document."""

    @abstractmethod
    async def docs_replace_text(
        self, document_id: str | None, find_text: str | None, replace_with_text: str | None
    ) -> dict:
        """Replace every occurrence of a string in a document."""

    @abstractmethod
    async def docs_list_documents(self, max_results: int = 10) -> dict:
        """List documents visible to the account."""

    @abstractmethod
    async def docs_delete_document(self, document_id: str | None) -> dict:
        """Delete a document."""

    @abstractmethod
    async def docs_export_pdf(self, document_id: str | None, output_path: str | None) -> dict:
        """Export a document as PDF to a local path."""

    # ---- Files ----

    @abstractmethod
    async def drive_list_files(
        self,
        max_results: int = 50,
        mime_type: str | None = None,
        query: str | None = None,
        order_by: str = "modifiedTime desc",
    ) -> dict:
        """List files, optionally filtered by MIME type and name."""

    @abstractmethod
    async def drive_get_file(self, file_id: str | None, fields: str | None = None) -> dict:
        """Get file metadata."""

    @abstractmethod
    async def drive_create_file(
        self,
        name: str | None,
        mime_type: str | None,
        content: str | None = None,
        parents: list[str] | None = None,
    ) -> dict:
        """Create a file, uploading ``content`` when given."""

    @abstractmethod
    async def drive_update_file(
        self,
        file_id: str | None,
        name: str | None = None,
        content: str | None = None,
        add_parents: list[str] | None = None,
        remove_parents: list[str] | None = None,
    ) -> dict:
        """Rename, re-parent and/or replace the content of a file."""

    @abstractmethod
    async def drive_delete_file(self, file_id: str | None) -> dict:
        """Delete a file."""

    @abstractmethod
    async def drive_copy_file(
        self, file_id: str | None, name: str | None = None, parents: list[str] | None = None
    ) -> dict:
        """Copy a file."""

    @abstractmethod
    async def drive_move_file(
        self, file_id: str | None, add_parents: list[str] | None, remove_parents: list[str] | None
    ) -> dict:
        """Move a file between folders."""

    # ---- Permissions ----

    @abstractmethod
    async def drive_list_permissions(self, file_id: str | None) -> dict:
        """List who a file is shared with."""

    @abstractmethod
    async def drive_create_permission(
        self,
        file_id: str | None,
        email_address: str | None,
        role: str | None,
        type: str | None,
    ) -> dict:
        """Share a file."""

    @abstractmethod
    async def drive_delete_permission(self, file_id: str | None, permission_id: str | None) -> dict:
        """Revoke a permission."""

    # ---- Revisions ----

    @abstractmethod
    async def drive_list_revisions(self, file_id: str | None) -> dict:
        """List revisions of a file."""

    @abstractmethod
    async def drive_get_revision(self, file_id: str | None, revision_id: str | None) -> dict:
        """Get one revision."""

    @abstractmethod
    async def drive_delete_revision(self, file_id: str | None, revision_id: str | None) -> dict:
        """Delete one revision."""

    # ---- Comments ----

    @abstractmethod
    async def drive_list_comments(self, file_id: str | None, max_results: int = 100) -> dict:
        """List comments on a file."""

    @abstractmethod
    async def drive_create_comment(
        self, file_id: str | None, content: str | None, quoted_file_content: str | None = None
    ) -> dict:
        """Add a comment."""

    @abstractmethod
    async def drive_delete_comment(self, file_id: str | None, comment_id: str | None) -> dict:
        """Delete a comment."""

    # ---- Replies ----

    @abstractmethod
    async def drive_list_replies(self, file_id: str | None, comment_id: str | None) -> dict:
        """List replies to a comment."""

    @abstractmethod
    async def drive_create_reply(self, file_id: str | None, comment_id: str | None, content: str | None) -> dict:
        """Reply to a comment."""

    @abstractmethod
    async def drive_delete_reply(
        self, file_id: str | None, comment_id: str | None, reply_id: str | None
    ) -> dict:
        """Delete a reply."""

    async def close(self) -> None:
        """Clean up resources (HTTP clients, etc.)."""
