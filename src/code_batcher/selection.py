from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from code_batcher.config import Node


def collect_selected_files(nodes: Sequence[Node], *, force: bool = False) -> list[Node]:
    """Flatten a selection tree into the ordered list of selected files.

    Depth-first, in tree order:

    - a file is kept when it is selected;
    - a selected folder keeps every file beneath it, whatever their own flags;
    - an unselected folder is not kept itself, its children are evaluated one by one.

    The input tree is never modified.

    Args:
        nodes (Sequence[Node]): the top-level nodes of the tree
        force (bool): treat every node as selected (set when an ancestor folder is selected)

    Returns:
        list[Node]: the selected file nodes
    """
    result: list[Node] = []
    for node in nodes:
        selected = force or node.selected
        if node.is_file:
            if selected:
                result.append(node)
        elif node.children:
            result.extend(collect_selected_files(node.children, force=selected))
    return result


def collect_all_files(nodes: Sequence[Node]) -> list[Node]:
    """Collect every file of a tree, ignoring selection flags."""
    return collect_selected_files(nodes, force=True)


def select_all(nodes: Sequence[Node]) -> list[Node]:
    """Return a copy of the tree with every node selected."""
    return [
        node.model_copy(
            update={
                "selected": True,
                "children": select_all(node.children) if node.children is not None else None,
            },
        )
        for node in nodes
    ]
