"""Stack-based rebuilding of nested view item trees"""

from typing import Any, Callable, Optional, Sequence

# transform(item) -> (rebuilt node or None to drop it, source children or None for a leaf)
Transform = Callable[[Any], tuple[Optional[Any], Optional[Sequence[Any]]]]
Attach = Callable[[Any, list], None]


def map_view_items(
    items: Sequence[Any],
    transform: Transform,
    attach: Attach,
    keep_empty_panels: bool = True,
) -> list:
    """
    Rebuild a view item tree of any depth without recursion.

    Every source item is passed to ``transform``. When it reports children,
    they are rebuilt as well and handed to ``attach(node, children)`` once the
    walk is complete, in their original order and with dropped items removed.
    A panel whose rebuilt children are all dropped is attached an empty list
    unless ``keep_empty_panels`` is False.
    """
    roots: list = [None] * len(items)
    stack = [(item, roots, index) for index, item in enumerate(items)]
    panels: list[tuple[Any, list]] = []

    while stack:
        item, target, index = stack.pop()
        node, children = transform(item)
        if node is None:
            continue
        target[index] = node
        if children is not None:
            rebuilt: list = [None] * len(children)
            panels.append((node, rebuilt))
            stack.extend((child, rebuilt, i) for i, child in enumerate(children))

    for node, rebuilt in panels:
        rebuilt[:] = [child for child in rebuilt if child is not None]
        if rebuilt or keep_empty_panels:
            attach(node, rebuilt)

    return [node for node in roots if node is not None]
