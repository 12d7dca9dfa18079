"""Core data models shared across vibeedit components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Dict, List, Mapping, Optional

INTENT_TYPES = (
    "add_logo",
    "replace_logo",
    "update_styles",
    "update_layout",
    "add_section",
    "content_edit",
    "fix_bug",
)
ASSET_TYPES = ("logo", "hero", "image", "icon")
STYLE_SYSTEMS = ("tailwind", "css", "unknown")
SCOPES = ("component", "page", "global")
RISK_LEVELS = ("low", "medium", "high")
EDIT_STATUSES = ("pending", "applied", "reverted", "failed")


def utc_now() -> str:
    """Return the current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    return datetime.now(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Intent:
    """Structured classification of a free-text edit instruction."""

    intent_type: str
    needs_clarification: bool
    target: Optional[str] = None
    requires_asset: bool = False
    asset_type: Optional[str] = None
    style_system: str = "unknown"
    scope: str = "component"
    risk: str = "medium"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent_type": self.intent_type,
            "target": self.target,
            "requires_asset": self.requires_asset,
            "asset_type": self.asset_type,
            "style_system": self.style_system,
            "scope": self.scope,
            "risk": self.risk,
            "needs_clarification": self.needs_clarification,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Intent":
        """Build an intent from the classifier schema; unknown keys are ignored."""
        target = payload.get("target")
        asset_type = payload.get("asset_type")
        style_system = payload.get("style_system")
        scope = payload.get("scope")
        risk = payload.get("risk")
        return cls(
            intent_type=str(payload["intent_type"]),
            needs_clarification=bool(payload["needs_clarification"]),
            target=str(target) if isinstance(target, str) and target.strip() else None,
            requires_asset=bool(payload.get("requires_asset", False)),
            asset_type=asset_type if asset_type in ASSET_TYPES else None,
            style_system=style_system if style_system in STYLE_SYSTEMS else "unknown",
            scope=scope if scope in SCOPES else "component",
            risk=risk if risk in RISK_LEVELS else "medium",
        )


@dataclass(frozen=True)
class Section:
    """A named, pattern-matched slice of a document."""

    name: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "content": self.content}


@dataclass
class DocumentIndex:
    """Cached per-project view of a document and its named sections."""

    project_id: str
    document: str
    sections: Dict[str, Section] = field(default_factory=dict)
    style_system: str = "css"
    last_indexed_at: str = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectId": self.project_id,
            "document": self.document,
            "sections": {name: section.to_dict() for name, section in self.sections.items()},
            "styleSystem": self.style_system,
            "lastIndexedAt": self.last_indexed_at,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DocumentIndex":
        raw_sections = payload.get("sections") or {}
        sections: Dict[str, Section] = {}
        if isinstance(raw_sections, Mapping):
            for name, raw in raw_sections.items():
                if isinstance(raw, Mapping) and isinstance(raw.get("content"), str):
                    sections[str(name)] = Section(name=str(raw.get("name", name)), content=raw["content"])
        return cls(
            project_id=str(payload["projectId"]),
            document=str(payload.get("document", "")),
            sections=sections,
            style_system=str(payload.get("styleSystem", "css")),
            last_indexed_at=str(payload.get("lastIndexedAt") or utc_now()),
        )


@dataclass(frozen=True)
class EditContext:
    """Sections and constraints selected for one edit request."""

    components: List[Section]
    constraints: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "components": [component.to_dict() for component in self.components],
            "constraints": list(self.constraints),
        }


@dataclass
class EditResult:
    """Outcome of the generation step."""

    success: bool
    diff: str = ""
    summary: str = ""
    retry_count: int = 0
    token_count: int = 0
    cost: float = 0.0
    latency_ms: int = 0
    error: Optional[str] = None
    error_code: Optional[str] = None


@dataclass(frozen=True)
class ValidationFinding:
    """A blocking validation problem."""

    severity: str
    category: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"severity": self.severity, "category": self.category, "message": self.message}


@dataclass(frozen=True)
class ValidationWarning:
    """A non-blocking validation note."""

    category: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"category": self.category, "message": self.message}


@dataclass
class ValidationReport:
    """Aggregated findings from every document check."""

    errors: List[ValidationFinding] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [error.to_dict() for error in self.errors],
            "warnings": [warning.to_dict() for warning in self.warnings],
        }


@dataclass
class Edit:
    """Ledger entry for a single edit submission."""

    edit_id: str
    project_id: str
    user_id: str
    timestamp: str
    intent: Intent
    original_prompt: str
    diff: str
    summary: str
    status: str
    retry_count: int = 0
    token_count: int = 0
    cost: float = 0.0
    latency_ms: int = 0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "editId": self.edit_id,
            "projectId": self.project_id,
            "userId": self.user_id,
            "timestamp": self.timestamp,
            "intent": self.intent.to_dict(),
            "originalPrompt": self.original_prompt,
            "diff": self.diff,
            "summary": self.summary,
            "status": self.status,
            "retryCount": self.retry_count,
            "tokenCount": self.token_count,
            "cost": self.cost,
            "latencyMs": self.latency_ms,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Edit":
        return cls(
            edit_id=str(payload["editId"]),
            project_id=str(payload["projectId"]),
            user_id=str(payload.get("userId", "")),
            timestamp=str(payload.get("timestamp", "")),
            intent=Intent.from_dict(payload["intent"]),
            original_prompt=str(payload.get("originalPrompt", "")),
            diff=str(payload.get("diff", "")),
            summary=str(payload.get("summary", "")),
            status=str(payload.get("status", "pending")),
            retry_count=int(payload.get("retryCount") or 0),
            token_count=int(payload.get("tokenCount") or 0),
            cost=float(payload.get("cost") or 0.0),
            latency_ms=int(payload.get("latencyMs") or 0),
            error=payload.get("error"),
        )


@dataclass
class Metrics:
    """Deployment-wide aggregate counters for edit attempts."""

    total_edits: int = 0
    successful_edits: int = 0
    failed_edits: int = 0
    total_cost: float = 0.0
    avg_latency: float = 0.0
    last_updated: str = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalEdits": self.total_edits,
            "successfulEdits": self.successful_edits,
            "failedEdits": self.failed_edits,
            "totalCost": self.total_cost,
            "avgLatency": self.avg_latency,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Metrics":
        return cls(
            total_edits=int(payload.get("totalEdits") or 0),
            successful_edits=int(payload.get("successfulEdits") or 0),
            failed_edits=int(payload.get("failedEdits") or 0),
            total_cost=float(payload.get("totalCost") or 0.0),
            avg_latency=float(payload.get("avgLatency") or 0.0),
            last_updated=str(payload.get("lastUpdated") or utc_now()),
        )


@dataclass
class ErrorLog:
    """Operator-facing record of a pipeline failure."""

    error_id: str
    timestamp: str
    project_id: str
    user_id: str
    error_type: str
    error_message: str
    original_prompt: str
    resolved: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "errorId": self.error_id,
            "timestamp": self.timestamp,
            "projectId": self.project_id,
            "userId": self.user_id,
            "errorType": self.error_type,
            "errorMessage": self.error_message,
            "originalPrompt": self.original_prompt,
            "resolved": self.resolved,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ErrorLog":
        return cls(
            error_id=str(payload["errorId"]),
            timestamp=str(payload.get("timestamp", "")),
            project_id=str(payload.get("projectId", "")),
            user_id=str(payload.get("userId", "")),
            error_type=str(payload.get("errorType", "")),
            error_message=str(payload.get("errorMessage", "")),
            original_prompt=str(payload.get("originalPrompt", "")),
            resolved=bool(payload.get("resolved", False)),
        )
