"""
East Village Everything — Structured Tag Presenter
====================================================

Pure reshaping of the flat, already-sorted tag list into the one-level tree
the filter UIs render. No database access.

    food (has_children)          parents:    [food → [pizza, tacos]]
    ├── pizza                    standalone: [drinks]
    └── tacos
    drinks (no parent, no kids)
"""

from typing import Dict, List, Sequence

from app.schemas.tag import StructuredTagsResponse, TagResponse, TagTreeNode


def structure_tags(tags: Sequence[TagResponse]) -> StructuredTagsResponse:
    children_by_parent: Dict = {}
    for tag in tags:
        if tag.parent_tag_id is not None:
            children_by_parent.setdefault(tag.parent_tag_id, []).append(tag)

    parents: List[TagTreeNode] = []
    standalone: List[TagResponse] = []
    for tag in tags:
        if tag.has_children:
            parents.append(
                TagTreeNode(
                    **tag.model_dump(),
                    children=children_by_parent.get(tag.id, []),
                )
            )
        elif tag.parent_tag_id is None:
            standalone.append(tag)

    return StructuredTagsResponse(parents=parents, standalone=standalone)
