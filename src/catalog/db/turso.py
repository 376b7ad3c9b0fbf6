"""
Codec for the Turso (libSQL) HTTP pipeline protocol.

A pipeline request carries a list of ``execute`` requests. Values travel as
typed objects: integers are sent as decimal strings, blobs as base64, and
SQL NULL as ``{"type": "null"}``. Every request gets a result entry, either
``{"type": "ok", "response": {...}}`` or ``{"type": "error", "error": {...}}``.
"""
import base64
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from catalog.core.exceptions import DatabaseError, QueryExecutionError


@dataclass
class Statement:
    sql: str
    args: List[Any] = field(default_factory=list)


StatementLike = Union[Statement, str, Tuple[str, Sequence[Any]]]


def encode_arg(value: Any) -> Dict[str, Any]:
    """Encode a Python value as a typed protocol value."""
    if value is None:
        return {"type": "null"}
    if isinstance(value, bool):
        return {"type": "integer", "value": "1" if value else "0"}
    if isinstance(value, int):
        return {"type": "integer", "value": str(value)}
    if isinstance(value, float):
        return {"type": "float", "value": value}
    if isinstance(value, (bytes, bytearray, memoryview)):
        return {"type": "blob", "base64": base64.b64encode(bytes(value)).decode("ascii")}
    return {"type": "text", "value": str(value)}


def decode_cell(cell: Any) -> Any:
    """Decode a typed protocol value into a Python value."""
    if not isinstance(cell, dict):
        # Some gateways return bare JSON scalars
        return cell

    cell_type = cell.get("type")
    if cell_type == "null":
        return None
    if cell_type == "integer":
        return int(cell["value"])
    if cell_type == "float":
        return float(cell["value"])
    if cell_type == "blob":
        return base64.b64decode(cell.get("base64", ""))
    return cell.get("value")


def to_statement(statement: StatementLike) -> Statement:
    if isinstance(statement, Statement):
        return statement
    if isinstance(statement, str):
        return Statement(statement)
    sql, args = statement
    return Statement(sql, list(args or []))


def build_pipeline(statements: Iterable[StatementLike], close: bool = False) -> Dict[str, Any]:
    """Build the JSON body for a pipeline POST."""
    requests = []
    for statement in statements:
        stmt = to_statement(statement)
        body: Dict[str, Any] = {"sql": stmt.sql}
        if stmt.args:
            body["args"] = [encode_arg(arg) for arg in stmt.args]
        requests.append({"type": "execute", "stmt": body})

    if close:
        requests.append({"type": "close"})

    return {"requests": requests}


@dataclass
class ResultSet:
    """Rows returned for one executed statement"""
    columns: List[str] = field(default_factory=list)
    rows: List[List[Any]] = field(default_factory=list)
    affected_row_count: int = 0
    last_insert_rowid: Optional[int] = None

    def as_dicts(self) -> List[Dict[str, Any]]:
        return [dict(zip(self.columns, row)) for row in self.rows]

    def first(self) -> Optional[Dict[str, Any]]:
        dicts = self.as_dicts()
        return dicts[0] if dicts else None

    def scalar(self) -> Any:
        if not self.rows or not self.rows[0]:
            return None
        return self.rows[0][0]

    def __len__(self) -> int:
        return len(self.rows)


def _column_names(result: Dict[str, Any]) -> List[str]:
    if "cols" in result:
        return [col.get("name") if isinstance(col, dict) else str(col) for col in result["cols"]]
    return list(result.get("columns") or [])


def parse_result(result: Dict[str, Any]) -> ResultSet:
    """Parse the ``result`` object of a single execute response."""
    last_id = result.get("last_insert_rowid")
    return ResultSet(
        columns=_column_names(result),
        rows=[[decode_cell(cell) for cell in row] for row in result.get("rows") or []],
        affected_row_count=int(result.get("affected_row_count") or 0),
        last_insert_rowid=int(last_id) if last_id is not None else None,
    )


def parse_pipeline_response(
    payload: Dict[str, Any],
    statements: Optional[Sequence[Statement]] = None
) -> List[ResultSet]:
    """
    Parse a pipeline response into one ResultSet per execute request.

    Raises:
        QueryExecutionError: When any statement was rejected by the gateway
        DatabaseError: When the payload does not have the expected shape
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("results"), list):
        raise DatabaseError("Malformed pipeline response: missing results", "EXECUTE")

    result_sets = []
    for index, entry in enumerate(payload["results"]):
        if not isinstance(entry, dict):
            raise DatabaseError(f"Malformed pipeline result at index {index}", "EXECUTE")

        if entry.get("type") == "error":
            error = entry.get("error") or {}
            sql = statements[index].sql if statements and index < len(statements) else None
            raise QueryExecutionError(
                error.get("message", "Statement failed"),
                sql=sql,
                code=error.get("code"),
            )

        response = entry.get("response") or {}
        if response.get("type") == "close":
            continue

        result = response.get("result")
        if result is None:
            raise DatabaseError(f"Malformed pipeline result at index {index}", "EXECUTE")
        result_sets.append(parse_result(result))

    return result_sets
