from __future__ import annotations

"""JSON-compatible value types for CLI output and server command payloads.

Outline, folding and token payloads are declared against these aliases so the
shape of everything that crosses the process boundary stays explicit.
"""

from typing import TypeAlias


JSONScalar: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, JSONValue]
JSONArray: TypeAlias = list[JSONValue]
