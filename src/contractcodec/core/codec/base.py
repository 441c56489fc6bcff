"""Per-call context shared by the codec stages."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List

from contractcodec.core.errors import CodecWarning
from contractcodec.utils.config import DEFAULT_ID_NAMESPACE
from contractcodec.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CodecContext:
    """State for exactly one import or export call.

    Built fresh by :class:`ContractCodec` for every call and discarded
    afterwards; stages never keep state between calls.
    """

    settings: Dict[str, Any] = field(default_factory=dict)
    warnings: List[CodecWarning] = field(default_factory=list)

    def setting(self, key: str, default: Any = None) -> Any:
        return self.settings.get(key, default)

    @property
    def compound_key_property(self) -> str:
        return self.setting("compound_key_property", "compoundKeys")

    @property
    def status_property(self) -> str:
        return self.setting("status_property", "status")

    @property
    def reserved_keys(self) -> frozenset:
        return frozenset({self.compound_key_property, self.status_property})

    def warn(self, warning: CodecWarning) -> None:
        """Record a non-fatal finding and log it."""
        logger.warning(str(warning))
        self.warnings.append(warning)

    def synthesize_id(self, *parts: str) -> str:
        """Deterministic identifier for an entity that arrived without one.

        The same parts always give the same id, so repeated import cycles
        over one document are idempotent.
        """
        namespace = uuid.UUID(self.setting("id_namespace", DEFAULT_ID_NAMESPACE))
        return str(uuid.uuid5(namespace, "/".join(parts)))


class CodecStage:
    """Base class for codec stages."""

    def __init__(self, context: CodecContext):
        """Initialize stage.

        Args:
            context: Per-call codec context
        """
        self.context = context
