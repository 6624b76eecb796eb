"""
Project-data embedding for compiled .nut files.

The editor can stamp a metadata header on top of the compiled source and
append the whole project document as base64 inside ``//`` comments, so the
visual script can later be restored from the .nut file alone:

    <metadata header>
    <compiled source>

    // @squirrelgraph-project-data-begin
    // eyJ2ZXJzaW9uIjogIjEuMC4wIiwgImRhdGEiOiB7Li4ufX0=...
    // @squirrelgraph-project-data-end

The compiler itself never calls into this module.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from squirrelgraph import __version__

logger = logging.getLogger(__name__)

CURRENT_PROJECT_VERSION = "1.0.0"
EDITOR_VERSION = __version__

BEGIN_MARKER = "// @squirrelgraph-project-data-begin"
END_MARKER = "// @squirrelgraph-project-data-end"
CHUNK_SIZE = 80

_RULE = "// " + "=" * 40


def metadata_header(
    metadata: Mapping[str, Any],
    include_graph: bool = False,
    generated_at: Optional[datetime] = None,
) -> str:
    """Boxed comment header naming the project; ends with a blank line."""
    generated_at = generated_at or datetime.now(timezone.utc)
    lines = [
        _RULE,
        "// squirrelgraph - Generated Code",
        _RULE,
        f"// Project: {metadata.get('name') or 'Untitled Project'}",
        f"// Version: {metadata.get('version') or '1.0.0'}",
    ]
    if metadata.get("author"):
        lines.append(f"// Author: {metadata['author']}")
    if metadata.get("description"):
        lines.append(f"// Description: {metadata['description']}")
    lines += [
        f"// Generated: {generated_at.isoformat()}",
        f"// Editor Version: {metadata.get('editorVersion') or EDITOR_VERSION}",
        _RULE,
    ]
    if include_graph:
        lines += [
            "//",
            "// WARNING: Do not manually edit the metadata below.",
            "// It is used to restore the visual script in the editor.",
            "//",
        ]
    return "\n".join(lines) + "\n\n"


def embed_project(code: str, project: Mapping[str, Any], version: str = CURRENT_PROJECT_VERSION) -> str:
    """Append ``project`` to ``code`` as a fenced base64 comment block."""
    payload = json.dumps({"version": version, "data": project}, separators=(",", ":"))
    encoded = base64.b64encode(payload.encode("utf-8")).decode("ascii")
    chunks = [encoded[i:i + CHUNK_SIZE] for i in range(0, len(encoded), CHUNK_SIZE)]

    block = [BEGIN_MARKER, *(f"// {chunk}" for chunk in chunks), END_MARKER, ""]
    return code + "\n\n" + "\n".join(block)


def extract_project(code: str) -> Optional[Dict[str, Any]]:
    """
    Recover the project embedded by ``embed_project``.

    Returns None when there is no embedded block or it cannot be decoded.
    """
    begin = code.find(BEGIN_MARKER)
    end = code.find(END_MARKER)
    if begin == -1 or end == -1 or end < begin:
        return None

    section = code[begin + len(BEGIN_MARKER):end]
    parts = [
        line.strip()[2:].strip()
        for line in section.split("\n")
        if line.strip().startswith("//")
    ]
    encoded = "".join(p for p in parts if p)

    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
        parsed = json.loads(decoded)
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        logger.error("Failed to extract project from code: %s", exc)
        return None

    if not isinstance(parsed, dict) or "data" not in parsed:
        logger.error("Embedded project block has no 'data' field")
        return None
    return parsed["data"]
