"""Node aggregation engine.

Turns the raw partial-search payload of every node into a NodeReportItem.
Missing or malformed attributes are rendered as a placeholder; a node is
never dropped from the report.
"""

from typing import Any

from src.reporting.errors import UsageLookupError
from src.reporting.models import PLACEHOLDER, NodeReportItem
from src.reporting.protocols import UsageIndex
from src.utils.logging import get_logger

logger = get_logger(__name__)


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return PLACEHOLDER
    text = str(value).strip()
    return text or PLACEHOLDER


def _cookbook_entry(name: str, details: Any) -> str:
    if isinstance(details, dict):
        version = details.get("version")
    else:
        version = details
    if version is None or isinstance(version, (dict, list)) or not str(version):
        return name
    return f"{name}({version})"


def _cookbooks(value: Any) -> tuple[str, ...]:
    """Render applied cookbooks as ``name(version)`` sorted by name."""
    if isinstance(value, dict):
        return tuple(
            _cookbook_entry(str(name), value[name]) for name in sorted(value, key=str)
        )
    if isinstance(value, list):
        return tuple(sorted(str(name) for name in value if name is not None))
    return ()


def build_node_item(payload: Any) -> NodeReportItem:
    """Build a report row from one node's partial-search data.

    Args:
        payload: Mapping with ``name``, ``chef_version``, ``os``,
            ``os_version`` and ``cookbooks`` keys, any of which may be absent

    Returns:
        NodeReportItem with placeholders for every unusable field
    """
    if not isinstance(payload, dict):
        logger.warning(f"Malformed node payload: {payload!r}")
        return NodeReportItem(name=PLACEHOLDER)

    item = NodeReportItem(
        name=_text(payload.get("name")),
        chef_version=_text(payload.get("chef_version")),
        os=_text(payload.get("os")),
        os_version=_text(payload.get("os_version")),
        cookbooks=_cookbooks(payload.get("cookbooks")),
    )
    if PLACEHOLDER in (item.name, item.chef_version, item.os, item.os_version):
        logger.debug("Node reported incomplete attributes", node=item.name)
    return item


def aggregate_nodes(usage_index: UsageIndex) -> list[NodeReportItem]:
    """Public entry point for the nodes report.

    Returns:
        One NodeReportItem per node, sorted by node name

    Raises:
        UsageLookupError: If the node search itself fails
    """
    try:
        payloads = usage_index.all_nodes()
    except UsageLookupError:
        raise
    except Exception as e:
        logger.error(f"Unable to search nodes: {e}")
        raise UsageLookupError(f"unable to search nodes: {e}") from e

    items = [build_node_item(payload) for payload in payloads]
    items.sort(key=lambda item: item.name)
    logger.info("Node aggregation finished", nodes=len(items))
    return items
