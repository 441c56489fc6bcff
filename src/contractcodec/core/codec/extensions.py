"""Pass-through store for document content the codec does not model.

Two kinds of entries share one ordered list per owner (table, column,
relationship or envelope):

* ``FIELD`` entries are unknown keys found at the owner's own level, e.g.
  ``quality`` or ``authoritativeDefinitions`` on a schema object.
* ``CUSTOM_PROPERTY`` entries are the owner's ``customProperties`` items.
  A few of their keys are owned by the codec (compound key descriptors and
  the relocated table status) and are injected or extracted on demand.

A ``customProperties`` item that has no string ``property`` is kept with an
empty key and re-emitted verbatim from ``value``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from contractcodec.core.codec.base import CodecStage
from contractcodec.core.codec.wire import CUSTOM_PROPERTIES, LEGACY_CUSTOM
from contractcodec.core.document import NodeKind, is_kind
from contractcodec.core.errors import ExtensionConflictWarning, LegacyFormatWarning
from contractcodec.core.schema.types import ExtensionEntry, ExtensionPlacement
from contractcodec.utils.logging import get_logger

logger = get_logger(__name__)

_RAW_KEY = ""


class MetadataPreserver(CodecStage):
    """Route unmodeled fields into extension entries and back."""

    # Import side

    def collect(
        self,
        node: Dict[str, Any],
        consumed: Iterable[str],
        table: Optional[str] = None,
        column: Optional[str] = None,
    ) -> List[ExtensionEntry]:
        """Capture every key of ``node`` the codec did not consume.

        A legacy ``custom`` mapping is rewritten into custom property entries
        placed after the node's own ``customProperties``.

        Args:
            node: Document object (schema object, property, relationship...)
            consumed: Keys already mapped onto modeled attributes
            table: Owning table name, for warnings
            column: Owning column name, for warnings

        Returns:
            Field entries followed by custom property entries, each group in
            document order
        """
        consumed = set(consumed)
        legacy = node.get(LEGACY_CUSTOM)
        if LEGACY_CUSTOM in node and is_kind(legacy, NodeKind.OBJECT):
            consumed.add(LEGACY_CUSTOM)
        else:
            legacy = None

        entries = [
            ExtensionEntry(key=key, value=value, placement=ExtensionPlacement.FIELD)
            for key, value in node.items()
            if key not in consumed and key != CUSTOM_PROPERTIES
        ]

        if CUSTOM_PROPERTIES in node:
            custom = node[CUSTOM_PROPERTIES]
            if is_kind(custom, NodeKind.ARRAY) and custom:
                entries.extend(self._read_custom_properties(custom))
            else:
                # Empty or not a list: nothing to interpret, keep it whole
                entries.append(
                    ExtensionEntry(
                        key=CUSTOM_PROPERTIES,
                        value=custom,
                        placement=ExtensionPlacement.FIELD,
                    )
                )

        if legacy is not None:
            entries.extend(self._convert_legacy(legacy, entries, table, column))

        return entries

    def _convert_legacy(
        self,
        legacy: Dict[Any, Any],
        entries: List[ExtensionEntry],
        table: Optional[str],
        column: Optional[str],
    ) -> List[ExtensionEntry]:
        present = {
            entry.key
            for entry in entries
            if entry.placement is ExtensionPlacement.CUSTOM_PROPERTY
        }
        converted = []
        skipped = []
        for key, value in legacy.items():
            key = str(key)
            if key in present:
                # An explicit customProperties item wins
                skipped.append(key)
                continue
            present.add(key)
            converted.append(ExtensionEntry(key=key, value=value))

        self.context.warn(
            LegacyFormatWarning(
                message=(
                    f"Converted legacy '{LEGACY_CUSTOM}' mapping to "
                    f"{len(converted)} customProperties entries"
                    + (f"; kept existing {skipped}" if skipped else "")
                ),
                table=table,
                column=column,
                details={"converted": [e.key for e in converted], "skipped": skipped},
            )
        )
        return converted

    def _read_custom_properties(self, items: List[Any]) -> List[ExtensionEntry]:
        entries = []
        for item in items:
            if is_kind(item, NodeKind.OBJECT) and is_kind(
                item.get("property"), NodeKind.STRING
            ):
                entries.append(
                    ExtensionEntry(
                        key=item["property"],
                        value=item.get("value"),
                        extra={
                            k: v for k, v in item.items() if k not in ("property", "value")
                        },
                    )
                )
            else:
                entries.append(ExtensionEntry(key=_RAW_KEY, value=item))
        return entries

    @staticmethod
    def find(entries: List[ExtensionEntry], key: str) -> Optional[ExtensionEntry]:
        """First custom property entry with ``key``, if any."""
        for entry in entries:
            if entry.placement is ExtensionPlacement.CUSTOM_PROPERTY and entry.key == key:
                return entry
        return None

    def extract(self, entries: List[ExtensionEntry], key: str) -> Any:
        """Value of a recognized custom property, or None when absent."""
        entry = self.find(entries, key)
        return entry.value if entry is not None else None

    # Export side

    def inject(
        self,
        entries: List[ExtensionEntry],
        key: str,
        value: Any,
        table: Optional[str] = None,
        column: Optional[str] = None,
    ) -> List[ExtensionEntry]:
        """Set a reserved custom property without duplicating it.

        An existing entry is replaced in place, keeping its position; a stale
        value is reported and discarded. Later duplicates are dropped.

        Returns:
            A new entry list; the input list is not modified
        """
        result: List[ExtensionEntry] = []
        placed = False

        for entry in entries:
            if entry.placement is not ExtensionPlacement.CUSTOM_PROPERTY or entry.key != key:
                result.append(entry)
                continue
            if entry.value != value:
                self.context.warn(
                    ExtensionConflictWarning(
                        message=(
                            f"Replacing stored '{key}' value {entry.value!r} "
                            f"with computed value {value!r}"
                        ),
                        table=table,
                        column=column,
                        details={"key": key},
                    )
                )
            if placed:
                continue
            result.append(ExtensionEntry(key=key, value=value, extra=dict(entry.extra)))
            placed = True

        if not placed:
            result.append(ExtensionEntry(key=key, value=value))

        return result

    def remove(
        self,
        entries: List[ExtensionEntry],
        key: str,
        table: Optional[str] = None,
        column: Optional[str] = None,
    ) -> List[ExtensionEntry]:
        """Drop a reserved custom property that no longer has computed state."""
        result = []
        for entry in entries:
            if entry.placement is ExtensionPlacement.CUSTOM_PROPERTY and entry.key == key:
                self.context.warn(
                    ExtensionConflictWarning(
                        message=f"Dropping stored '{key}' value {entry.value!r}; nothing to carry",
                        table=table,
                        column=column,
                        details={"key": key},
                    )
                )
                continue
            result.append(entry)
        return result

    def emit(
        self,
        node: Dict[str, Any],
        entries: List[ExtensionEntry],
        table: Optional[str] = None,
        column: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Write stored entries back onto a document object.

        Field entries never overwrite a key the codec already wrote. A
        ``customProperties`` value that was not a list is written back as is,
        unless custom property entries must go out too; it then becomes a raw
        item at the head of the list.
        """
        custom: List[Any] = []
        held: List[Any] = []  # customProperties kept whole on import

        for entry in entries:
            if entry.placement is ExtensionPlacement.FIELD and entry.key == CUSTOM_PROPERTIES:
                held.append(entry.value)
            elif entry.placement is ExtensionPlacement.FIELD:
                if entry.key in node:
                    logger.debug(f"Skipping extension field '{entry.key}': key already set")
                    continue
                node[entry.key] = entry.value
            elif entry.key == _RAW_KEY:
                custom.append(entry.value)
            else:
                item = {"property": entry.key, "value": entry.value}
                item.update(entry.extra)
                custom.append(item)

        if held and not custom:
            node[CUSTOM_PROPERTIES] = held[0]
        elif custom:
            for value in held:
                if is_kind(value, NodeKind.ARRAY) and not value:
                    continue
                self.context.warn(
                    ExtensionConflictWarning(
                        message=(
                            f"customProperties {value!r} is not a list; "
                            "keeping it as a raw item next to the written entries"
                        ),
                        table=table,
                        column=column,
                        details={"key": CUSTOM_PROPERTIES},
                    )
                )
                custom.insert(0, value)
            node[CUSTOM_PROPERTIES] = custom

        return node
