from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True, slots=True)
class OperationContextSnapshot:
    """What operation is currently active in this logical call tree.

    Fields:
      - parent_operation_id: id of the most recently started, not yet stopped operation
      - root_operation_id: id of the outermost operation of the chain
      - operation_name: name of the root operation

    Snapshots never reference each other directly. `link` is the restore
    record of the operation that published the snapshot (None for snapshots
    saved directly by callers); it is excluded from equality and holds no
    reference to the handle, so releasing a handle never changes how the
    chain unwinds.
    """

    parent_operation_id: str = ""
    root_operation_id: str = ""
    operation_name: str = ""

    link: Optional["OperationLink"] = field(default=None, compare=False, repr=False)

    def owner_completed(self) -> bool:
        """True when the operation that published this snapshot has completed."""
        return self.link is not None and self.link.disposed

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "parent_operation_id": self.parent_operation_id,
            "root_operation_id": self.root_operation_id,
            "operation_name": self.operation_name,
        }
        # Drop empty strings to keep payload compact.
        return {k: v for k, v in d.items() if v not in ("", None)}

    @classmethod
    def from_any(cls, v: Any) -> Optional["OperationContextSnapshot"]:
        if v is None:
            return None
        if isinstance(v, OperationContextSnapshot):
            return v
        if isinstance(v, dict):
            return cls(
                parent_operation_id=str(v.get("parent_operation_id") or v.get("parentOperationId") or ""),
                root_operation_id=str(v.get("root_operation_id") or v.get("rootOperationId") or ""),
                operation_name=str(v.get("operation_name") or v.get("operationName") or ""),
            )
        raise TypeError(f"cannot build OperationContextSnapshot from {type(v).__name__}")


class OperationLink:
    """Restore record of one operation: the context it captured and whether it completed.

    Owned by the handle and referenced by the snapshot it publishes. An
    operation abandoned without being stopped keeps `disposed` False, so its
    snapshot stays authoritative until something overwrites it.
    """

    __slots__ = ("parent_context", "disposed")

    def __init__(self, parent_context: Optional[OperationContextSnapshot] = None) -> None:
        self.parent_context = parent_context
        self.disposed = False
