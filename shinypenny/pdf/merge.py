"""Concatenate page documents into one.

Each input is renumbered into a disjoint object-number range, then the
catalogs and page trees are collapsed into a single catalog whose page-tree
root lists every leaf page in input order.
"""

from __future__ import annotations

from collections.abc import Sequence

from pypdf.generic import ArrayObject, DictionaryObject, NameObject, NumberObject

from shinypenny.domain.errors import NoCatalogFound, NoPagesFound
from shinypenny.pdf.document import INHERITABLE_PAGE_KEYS, LAYOUT_TYPES, PageDocument
from shinypenny.runtime import get_logger

logger = get_logger(__name__)

OUTLINE_TYPES = ("/Outlines", "/Outline")
# Page-tree bookkeeping rebuilt on the surviving root.
TREE_KEYS = ("/Kids", "/Count", "/Parent")


def combine(documents: Sequence[PageDocument]) -> PageDocument:
    """Merge ``documents`` into a new document; inputs are consumed.

    Raises:
        NoPagesFound: No input contributes a page-tree node.
        NoCatalogFound: No input contributes a catalog.
    """
    merged = PageDocument()
    next_id = 1
    page_order: list[int] = []

    for index, document in enumerate(documents):
        logger.info("Adding pdf %02d", index)
        if document.root is not None:
            document.materialize_inherited_attributes()
        mapping = document.renumber_objects_with(next_id, target=merged)
        logger.debug("pdf %02d contributes %d objects", index, len(mapping))
        next_id = document.max_id + 1
        if document.root is not None:
            page_order.extend(document.page_ids())

    page_set = set(page_order)
    catalog: tuple[int, DictionaryObject] | None = None
    pages_root: tuple[int, DictionaryObject] | None = None
    leaf_pages: dict[int, DictionaryObject] = {}

    for document in documents:
        for object_id in sorted(document.objects):
            obj = document.objects[object_id]
            kind = document.type_name(obj)
            if object_id in page_set and isinstance(obj, DictionaryObject):
                leaf_pages[object_id] = obj
            elif kind == "/Catalog":
                if catalog is None:
                    catalog = (object_id, obj)
            elif kind == "/Pages":
                if pages_root is None:
                    pages_root = (object_id, obj)
                else:
                    _merge_dictionary(pages_root[1], obj)
            elif kind == "/Page":
                logger.debug("Dropping page object %d outside any page tree", object_id)
            elif kind in OUTLINE_TYPES:
                logger.warning("Outlines are not supported, dropping object %d", object_id)
            elif kind in LAYOUT_TYPES:
                continue
            else:
                merged.objects[object_id] = obj

    if pages_root is None:
        raise NoPagesFound("No pages found in document.")
    if catalog is None:
        raise NoCatalogFound("Catalog root not found.")

    root_id, root = pages_root
    # inherited attributes already live on the leaves of their own document
    for key in INHERITABLE_PAGE_KEYS:
        root.pop(key, None)
    root_ref = merged.reference(root_id)
    for page_id in page_order:
        page = leaf_pages[page_id]
        page[NameObject("/Parent")] = root_ref
        merged.objects[page_id] = page

    root[NameObject("/Kids")] = ArrayObject(merged.reference(page_id) for page_id in page_order)
    root[NameObject("/Count")] = NumberObject(len(page_order))
    root.pop("/Parent", None)
    merged.objects[root_id] = root

    catalog_id, catalog_obj = catalog
    catalog_obj[NameObject("/Pages")] = root_ref
    catalog_obj.pop("/Outlines", None)
    merged.objects[catalog_id] = catalog_obj
    merged.root = catalog_id
    merged.max_id = len(merged.objects)

    dropped = merged.prune_objects()
    if dropped:
        logger.debug("Pruned %d unreachable objects", len(dropped))
    merged.renumber_objects()
    merged.compress()
    logger.info("Merged %d documents into %d pages", len(documents), len(page_order))
    return merged


def _merge_dictionary(survivor: DictionaryObject, other: DictionaryObject) -> None:
    """Copy keys of ``other`` into ``survivor``; existing keys win.

    Tree bookkeeping and inheritable page attributes are skipped.
    """
    for key in other:
        if key in TREE_KEYS or key in INHERITABLE_PAGE_KEYS or key in survivor:
            continue
        survivor[NameObject(key)] = other.raw_get(key)
