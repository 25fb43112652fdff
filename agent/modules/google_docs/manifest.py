"""Google Docs module manifest — tool definitions.

Registration order is the order clients see from tools/list.
"""

from shared.schemas.tools import ModuleManifest, ToolDefinition, ToolParameter

_STRINGS = {"type": "string"}


def _doc_id(description: str = "Google Doc ID") -> ToolParameter:
    return ToolParameter(name="documentId", type="string", description=description)


def _file_id(description: str = "Google Drive file ID") -> ToolParameter:
    return ToolParameter(name="fileId", type="string", description=description)


def _folders(name: str, description: str, required: bool = False) -> ToolParameter:
    return ToolParameter(name=name, type="array", items=_STRINGS, description=description, required=required)


MANIFEST = ModuleManifest(
    module_name="google_docs",
    description="Create, read and edit Google Docs and manage Google Drive files, sharing, revisions and comments.",
    tools=[
        # ---- Documents ----
        ToolDefinition(
            name="docs_create_document",
            description="Create a new Google Doc",
            parameters=[ToolParameter(name="title", type="string", description="Document title")],
        ),
        ToolDefinition(
            name="docs_get_document",
            description="Get the content of a Google Doc",
            parameters=[_doc_id()],
        ),
        ToolDefinition(
            name="docs_append_text",
            description="Append text to a Google Doc",
            parameters=[
                _doc_id(),
                ToolParameter(name="text", type="string", description="Text to append"),
            ],
        ),
        ToolDefinition(
            name="docs_replace_text",
            description="Find and replace text in a Google Doc",
            parameters=[
                _doc_id(),
                ToolParameter(name="findText", type="string", description="Text to find"),
                ToolParameter(name="replaceWithText", type="string", description="Text to replace with"),
            ],
        ),
        ToolDefinition(
            name="docs_list_documents",
            description="List your Google Docs",
            parameters=[
                ToolParameter(
                    name="maxResults", type="number", required=False, default=10,
                    description="Maximum number of documents to return (default: 10)",
                ),
            ],
        ),
        ToolDefinition(
            name="docs_delete_document",
            description="Delete a Google Doc",
            parameters=[_doc_id("Google Doc ID to delete")],
        ),
        ToolDefinition(
            name="docs_export_pdf",
            description="Export a Google Doc as PDF",
            parameters=[
                _doc_id(),
                ToolParameter(name="outputPath", type="string", description="Path to save the PDF file"),
            ],
        ),
        # ---- Drive files ----
        ToolDefinition(
            name="drive_list_files",
            description="List all files in Google Drive",
            parameters=[
                ToolParameter(
                    name="maxResults", type="number", required=False, default=50,
                    description="Maximum number of files to return (default: 50)",
                ),
                ToolParameter(
                    name="mimeType", type="string", required=False, description="Filter by MIME type (optional)",
                ),
                ToolParameter(name="query", type="string", required=False, description="Custom search query (optional)"),
                ToolParameter(
                    name="orderBy", type="string", required=False, default="modifiedTime desc",
                    description="Order results by field (default: modifiedTime desc)",
                ),
            ],
        ),
        ToolDefinition(
            name="drive_get_file",
            description="Get file metadata and content",
            parameters=[
                _file_id(),
                ToolParameter(name="fields", type="string", required=False, description="Fields to return (optional)"),
            ],
        ),
        ToolDefinition(
            name="drive_create_file",
            description="Create a new file in Google Drive",
            parameters=[
                ToolParameter(name="name", type="string", description="File name"),
                ToolParameter(name="mimeType", type="string", description="MIME type of the file"),
                ToolParameter(name="content", type="string", required=False, description="File content (optional)"),
                _folders("parents", "Parent folder IDs (optional)"),
            ],
        ),
        ToolDefinition(
            name="drive_update_file",
            description="Update file content or metadata",
            parameters=[
                _file_id(),
                ToolParameter(name="name", type="string", required=False, description="New file name (optional)"),
                ToolParameter(name="content", type="string", required=False, description="New file content (optional)"),
                _folders("addParents", "Add to these folders (optional)"),
                _folders("removeParents", "Remove from these folders (optional)"),
            ],
        ),
        ToolDefinition(
            name="drive_delete_file",
            description="Delete a file from Google Drive",
            parameters=[_file_id()],
        ),
        ToolDefinition(
            name="drive_copy_file",
            description="Copy a file in Google Drive",
            parameters=[
                _file_id("Source file ID"),
                ToolParameter(name="name", type="string", required=False, description="Name for the copied file (optional)"),
                _folders("parents", "Destination folder IDs (optional)"),
            ],
        ),
        ToolDefinition(
            name="drive_move_file",
            description="Move a file to different folders",
            parameters=[
                _file_id("File ID to move"),
                _folders("addParents", "Add to these folders", required=True),
                _folders("removeParents", "Remove from these folders", required=True),
            ],
        ),
        # ---- Permissions ----
        ToolDefinition(
            name="drive_list_permissions",
            description="List file permissions",
            parameters=[_file_id()],
        ),
        ToolDefinition(
            name="drive_create_permission",
            description="Share a file with users",
            parameters=[
                _file_id(),
                ToolParameter(
                    name="emailAddress", type="string", required=False, description="Email address to share with",
                ),
                ToolParameter(
                    name="role", type="string", enum=["reader", "writer", "commenter", "owner"],
                    description="Permission role",
                ),
                ToolParameter(
                    name="type", type="string", enum=["user", "group", "domain", "anyone"],
                    description="Permission type",
                ),
            ],
        ),
        ToolDefinition(
            name="drive_delete_permission",
            description="Remove file permissions",
            parameters=[
                _file_id(),
                ToolParameter(name="permissionId", type="string", description="Permission ID to remove"),
            ],
        ),
        # ---- Revisions ----
        ToolDefinition(
            name="drive_list_revisions",
            description="List file revisions/versions",
            parameters=[_file_id()],
        ),
        ToolDefinition(
            name="drive_get_revision",
            description="Get specific file revision",
            parameters=[
                _file_id(),
                ToolParameter(name="revisionId", type="string", description="Revision ID"),
            ],
        ),
        ToolDefinition(
            name="drive_delete_revision",
            description="Delete a file revision",
            parameters=[
                _file_id(),
                ToolParameter(name="revisionId", type="string", description="Revision ID to delete"),
            ],
        ),
        # ---- Comments ----
        ToolDefinition(
            name="drive_list_comments",
            description="List file comments",
            parameters=[
                _file_id(),
                ToolParameter(
                    name="maxResults", type="number", required=False, default=100,
                    description="Maximum number of comments (default: 100)",
                ),
            ],
        ),
        ToolDefinition(
            name="drive_create_comment",
            description="Add a comment to a file",
            parameters=[
                _file_id(),
                ToolParameter(name="content", type="string", description="Comment content"),
                ToolParameter(
                    name="quotedFileContent", type="string", required=False,
                    description="Quoted text from the file (optional)",
                ),
            ],
        ),
        ToolDefinition(
            name="drive_delete_comment",
            description="Delete a file comment",
            parameters=[
                _file_id(),
                ToolParameter(name="commentId", type="string", description="Comment ID to delete"),
            ],
        ),
        # ---- Replies ----
        ToolDefinition(
            name="drive_list_replies",
            description="List replies to a comment",
            parameters=[
                _file_id(),
                ToolParameter(name="commentId", type="string", description="Comment ID"),
            ],
        ),
        ToolDefinition(
            name="drive_create_reply",
            description="Reply to a comment",
            parameters=[
                _file_id(),
                ToolParameter(name="commentId", type="string", description="Comment ID to reply to"),
                ToolParameter(name="content", type="string", description="Reply content"),
            ],
        ),
        ToolDefinition(
            name="drive_delete_reply",
            description="Delete a reply to a comment",
            parameters=[
                _file_id(),
                ToolParameter(name="commentId", type="string", description="Comment ID"),
                ToolParameter(name="replyId", type="string", description="Reply ID to delete"),
            ],
        ),
    ],
)
