"""Two-way strategic merge patch computation.

`create_two_way_merge_patch` diffs two JSON documents of the same
resource and produces the strategic merge patch the API server would
apply to turn the first into the second. Which lists merge by key is
not inferred; it comes from the `PatchMeta` tree passed in.

Patch conventions:
- changed or added map keys carry their new value, removed keys are `null`
- lists with a merge key carry only added/changed items, each with its
  key; removed items become `{"$patch": "delete", <key>: <value>}` and
  `$setElementOrder/<field>` records the final key order
- primitive lists with merge strategy carry added values, and removed
  values under `$deleteFromPrimitiveList/<field>`
- every other list is replaced wholesale when it differs
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

DIRECTIVE_KEY = "$patch"
DELETE_DIRECTIVE = "delete"
SET_ELEMENT_ORDER_PREFIX = "$setElementOrder"
DELETE_FROM_PRIMITIVE_LIST_PREFIX = "$deleteFromPrimitiveList"

MERGE = "merge"
REPLACE = "replace"


class PatchComputationError(ValueError):
    """Inputs cannot be diffed into a strategic merge patch."""


@dataclass(frozen=True)
class PatchMeta:
    """Merge behaviour of one field and, for maps, of its children."""

    strategy: str = REPLACE
    merge_key: Optional[str] = None
    fields: Mapping[str, "PatchMeta"] = field(default_factory=dict)

    def child(self, name: str) -> "PatchMeta":
        return self.fields.get(name, NO_META)


NO_META = PatchMeta()


def merge_list(merge_key: Optional[str] = None, **fields: PatchMeta) -> PatchMeta:
    return PatchMeta(strategy=MERGE, merge_key=merge_key, fields=fields)


def fields_of(**fields: PatchMeta) -> PatchMeta:
    return PatchMeta(fields=fields)


def _same(left: Any, right: Any) -> bool:
    # Avoid Python's True == 1 when comparing JSON values.
    return json.dumps(left, sort_keys=True) == json.dumps(right, sort_keys=True)


def _index_by_key(items: List[Any], merge_key: str, path: str) -> Dict[Any, Dict[str, Any]]:
    index: Dict[Any, Dict[str, Any]] = {}
    for item in items:
        if not isinstance(item, dict):
            raise PatchComputationError(f"{path}: list item {item!r} is not an object")
        if merge_key not in item:
            raise PatchComputationError(f"{path}: map {item!r} does not contain declared merge key {merge_key!r}")
        key = item[merge_key]
        if not isinstance(key, (str, int, float, bool)):
            raise PatchComputationError(f"{path}: merge key {merge_key!r} has non-scalar value {key!r}")
        if key in index:
            raise PatchComputationError(f"{path}: duplicate merge key {merge_key}={key!r}")
        index[key] = item
    return index


def _diff_lists_of_maps(
    patch: Dict[str, Any],
    name: str,
    original: List[Any],
    modified: List[Any],
    meta: PatchMeta,
    path: str,
) -> None:
    merge_key = meta.merge_key or ""
    original_index = _index_by_key(original, merge_key, path)
    modified_index = _index_by_key(modified, merge_key, path)

    items: List[Dict[str, Any]] = []
    for key, item in modified_index.items():
        if key not in original_index:
            items.append(item)
            continue
        changes = _diff_maps(original_index[key], item, meta, f"{path}[{merge_key}={key}]")
        if changes:
            entry = {merge_key: key}
            entry.update(changes)
            items.append(entry)

    for key in original_index:
        if key not in modified_index:
            items.append({DIRECTIVE_KEY: DELETE_DIRECTIVE, merge_key: key})

    if items:
        patch[f"{SET_ELEMENT_ORDER_PREFIX}/{name}"] = [{merge_key: key} for key in modified_index]
        patch[name] = items


def _diff_primitive_lists(
    patch: Dict[str, Any],
    name: str,
    original: List[Any],
    modified: List[Any],
) -> None:
    added = [v for v in modified if not any(_same(v, o) for o in original)]
    removed = [v for v in original if not any(_same(v, m) for m in modified)]
    if added:
        patch[name] = added
    if removed:
        patch[f"{DELETE_FROM_PRIMITIVE_LIST_PREFIX}/{name}"] = removed
    if added or removed:
        patch[f"{SET_ELEMENT_ORDER_PREFIX}/{name}"] = list(modified)


def _diff_lists(
    patch: Dict[str, Any],
    name: str,
    original: List[Any],
    modified: List[Any],
    meta: PatchMeta,
    path: str,
) -> None:
    if meta.strategy != MERGE:
        if not _same(original, modified):
            patch[name] = modified
        return

    if meta.merge_key:
        _diff_lists_of_maps(patch, name, original, modified, meta, path)
        return

    if any(isinstance(v, (dict, list)) for v in original + modified):
        raise PatchComputationError(f"{path}: merging list of non-primitives requires a merge key")
    _diff_primitive_lists(patch, name, original, modified)


def _diff_maps(original: Dict[str, Any], modified: Dict[str, Any], meta: PatchMeta, path: str) -> Dict[str, Any]:
    patch: Dict[str, Any] = {}

    for name, new_value in modified.items():
        child_path = f"{path}.{name}" if path else name
        if name not in original:
            patch[name] = new_value
            continue

        old_value = original[name]
        if isinstance(old_value, dict) and isinstance(new_value, dict):
            changes = _diff_maps(old_value, new_value, meta.child(name), child_path)
            if changes:
                patch[name] = changes
        elif isinstance(old_value, list) and isinstance(new_value, list):
            _diff_lists(patch, name, old_value, new_value, meta.child(name), child_path)
        elif not _same(old_value, new_value):
            patch[name] = new_value

    for name in original:
        if name not in modified:
            patch[name] = None

    return patch


def _load_object(document: bytes, label: str) -> Dict[str, Any]:
    try:
        value = json.loads(document)
    except (TypeError, ValueError) as exc:
        raise PatchComputationError(f"{label} document is not valid JSON: {exc}") from exc
    if not isinstance(value, dict):
        raise PatchComputationError(f"{label} document is not a JSON object")
    return value


def create_two_way_merge_patch(original: bytes, modified: bytes, meta: PatchMeta) -> bytes:
    """Strategic merge patch turning `original` into `modified`.

    Keys present only in `original` are deleted by the patch, so both
    documents must describe the whole object.
    """

    patch = _diff_maps(_load_object(original, "original"), _load_object(modified, "modified"), meta, "")
    return json.dumps(patch, separators=(",", ":")).encode("utf-8")


_CONTAINER = fields_of(
    ports=merge_list("containerPort"),
    env=merge_list("name"),
    volumeMounts=merge_list("mountPath"),
    volumeDevices=merge_list("devicePath"),
)

# Patch metadata of core/v1 Pod, limited to the fields carrying
# patchStrategy/patchMergeKey in the API schema.
POD_PATCH_META = fields_of(
    metadata=fields_of(
        finalizers=merge_list(),
        ownerReferences=merge_list("uid"),
    ),
    spec=fields_of(
        volumes=merge_list("name"),
        initContainers=merge_list("name", **_CONTAINER.fields),
        containers=merge_list("name", **_CONTAINER.fields),
        ephemeralContainers=merge_list("name", **_CONTAINER.fields),
        imagePullSecrets=merge_list("name"),
        hostAliases=merge_list("ip"),
        topologySpreadConstraints=merge_list("topologyKey"),
        schedulingGates=merge_list("name"),
        resourceClaims=merge_list("name"),
    ),
    status=fields_of(
        conditions=merge_list("type"),
        podIPs=merge_list("ip"),
        hostIPs=merge_list("ip"),
    ),
)
