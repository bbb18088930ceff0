"""In-memory PDF object graphs.

A ``PageDocument`` is an arena of pypdf generic objects keyed by object
number. References between objects are ``IndirectObject`` values bound to
the arena, so they resolve through ``PageDocument.get_object``.
"""

from __future__ import annotations

import io
from collections.abc import Iterator, Mapping
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PyPdfError
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    NullObject,
    NumberObject,
    PdfObject,
    StreamObject,
)

from shinypenny.domain.errors import NoCatalogFound, UnsupportedFileKind
from shinypenny.runtime import get_logger

logger = get_logger(__name__)

PDF_HEADER = b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n"

# Page attributes a leaf page may inherit from its ancestors.
INHERITABLE_PAGE_KEYS = ("/Resources", "/MediaBox", "/CropBox", "/Rotate")

# Object types that only describe the file layout, never content.
LAYOUT_TYPES = ("/XRef", "/ObjStm")


def iter_references(obj: PdfObject) -> Iterator[int]:
    """Yield every object number referenced from ``obj``, depth first."""
    stack: list[PdfObject] = [obj]
    while stack:
        current = stack.pop()
        if isinstance(current, IndirectObject):
            yield current.idnum
        elif isinstance(current, DictionaryObject):
            stack.extend(current.raw_get(key) for key in current)
        elif isinstance(current, ArrayObject):
            stack.extend(current)


def remap_references(obj: PdfObject, mapping: Mapping[int, int], target: PageDocument) -> PdfObject:
    """Rewrite references in ``obj`` through ``mapping`` and bind them to ``target``.

    Plain dictionaries and arrays are rebuilt, so direct objects shared by
    several parents are never rewritten twice. Streams are updated in place.
    References to numbers missing from ``mapping`` become null.
    """
    if isinstance(obj, IndirectObject):
        new_id = mapping.get(obj.idnum)
        if new_id is None:
            logger.debug("Dropping dangling reference to object %d", obj.idnum)
            return NullObject()
        return IndirectObject(new_id, 0, target)
    if isinstance(obj, StreamObject):
        for key in list(obj.keys()):
            obj[key] = remap_references(obj.raw_get(key), mapping, target)
        return obj
    if isinstance(obj, DictionaryObject):
        rebuilt = DictionaryObject()
        for key in obj:
            rebuilt[key] = remap_references(obj.raw_get(key), mapping, target)
        return rebuilt
    if isinstance(obj, ArrayObject):
        return ArrayObject(remap_references(item, mapping, target) for item in obj)
    return obj


class PageDocument:
    """A PDF object graph: numbered objects plus the catalog's object number."""

    def __init__(self, objects: dict[int, PdfObject] | None = None, root: int | None = None) -> None:
        self.objects: dict[int, PdfObject] = objects if objects is not None else {}
        self.root = root
        self.max_id = max(self.objects, default=0)

    def __repr__(self) -> str:
        return f"PageDocument(objects={len(self.objects)}, root={self.root})"

    @classmethod
    def from_bytes(cls, data: bytes, source: str = "<memory>") -> PageDocument:
        """Load every numbered object of a serialized PDF into a new arena."""
        try:
            reader = PdfReader(io.BytesIO(data))
            if reader.is_encrypted:
                raise UnsupportedFileKind(f"Encrypted PDF is not supported: {source}")
            root_ref = reader.trailer.raw_get("/Root")
            document = cls()
            for idnum, generation in _object_numbers(reader):
                obj = reader.get_object(IndirectObject(idnum, generation, reader))
                if obj is None or isinstance(obj, NullObject):
                    continue
                if isinstance(obj, DictionaryObject) and document.type_name(obj) in LAYOUT_TYPES:
                    continue
                document.objects[idnum] = obj
        except (PyPdfError, KeyError, ValueError) as exc:
            raise UnsupportedFileKind(f"Could not read PDF {source}: {exc}") from exc

        identity = {idnum: idnum for idnum in document.objects}
        for idnum, obj in list(document.objects.items()):
            document.objects[idnum] = remap_references(obj, identity, document)
        document.root = root_ref.idnum if isinstance(root_ref, IndirectObject) else None
        document.max_id = max(document.objects, default=0)
        logger.debug("Loaded %s with %d objects", source, len(document.objects))
        return document

    @classmethod
    def from_file(cls, path: Path) -> PageDocument:
        return cls.from_bytes(path.read_bytes(), source=str(path))

    def get_object(self, ref: int | IndirectObject) -> PdfObject | None:
        idnum = ref if isinstance(ref, int) else ref.idnum
        return self.objects.get(idnum)

    def reference(self, idnum: int) -> IndirectObject:
        return IndirectObject(idnum, 0, self)

    def resolve(self, value: PdfObject | None) -> PdfObject | None:
        if isinstance(value, IndirectObject):
            return self.objects.get(value.idnum)
        return value

    def type_name(self, obj: PdfObject | None) -> str | None:
        if not isinstance(obj, DictionaryObject) or "/Type" not in obj:
            return None
        value = self.resolve(obj.raw_get("/Type"))
        return str(value) if isinstance(value, NameObject) else None

    def catalog(self) -> DictionaryObject:
        catalog = self.objects.get(self.root) if self.root is not None else None
        if not isinstance(catalog, DictionaryObject):
            raise NoCatalogFound("Catalog root not found.")
        return catalog

    def page_ids(self) -> list[int]:
        """Leaf page object numbers in page-tree order."""
        catalog = self.catalog()
        if "/Pages" not in catalog:
            return []
        ordered: list[int] = []
        visited: set[int] = set()
        stack: list[PdfObject] = [catalog.raw_get("/Pages")]
        while stack:
            ref = stack.pop()
            if not isinstance(ref, IndirectObject) or ref.idnum in visited:
                continue
            visited.add(ref.idnum)
            node = self.objects.get(ref.idnum)
            if not isinstance(node, DictionaryObject):
                continue
            if "/Kids" in node:
                kids = self.resolve(node.raw_get("/Kids"))
                if isinstance(kids, ArrayObject):
                    stack.extend(reversed(kids))
            else:
                ordered.append(ref.idnum)
        return ordered

    @property
    def page_count(self) -> int:
        return len(self.page_ids())

    def materialize_inherited_attributes(self) -> None:
        """Copy inheritable attributes from page-tree ancestors onto each leaf page."""
        for page_id in self.page_ids():
            page = self.objects[page_id]
            assert isinstance(page, DictionaryObject)
            seen: set[int] = {page_id}
            parent_ref = page.raw_get("/Parent") if "/Parent" in page else None
            while isinstance(parent_ref, IndirectObject) and parent_ref.idnum not in seen:
                seen.add(parent_ref.idnum)
                parent = self.objects.get(parent_ref.idnum)
                if not isinstance(parent, DictionaryObject):
                    break
                for key in INHERITABLE_PAGE_KEYS:
                    if key in parent and key not in page:
                        page[NameObject(key)] = parent.raw_get(key)
                parent_ref = parent.raw_get("/Parent") if "/Parent" in parent else None

    def renumber_objects_with(self, start: int, target: PageDocument | None = None) -> dict[int, int]:
        """Renumber objects contiguously from ``start`` in ascending order.

        References are rebound to ``target`` (this arena when omitted).
        Returns the old-to-new mapping.
        """
        target = self if target is None else target
        mapping = {old: new for new, old in enumerate(sorted(self.objects), start)}
        self.objects = {
            mapping[old]: remap_references(obj, mapping, target) for old, obj in self.objects.items()
        }
        if self.root is not None:
            self.root = mapping.get(self.root)
        self.max_id = max(self.objects, default=start - 1)
        return mapping

    def renumber_objects(self) -> dict[int, int]:
        return self.renumber_objects_with(1)

    def prune_objects(self) -> list[int]:
        """Drop objects not reachable from the catalog. Returns the dropped numbers."""
        reachable: set[int] = set()
        stack = [self.root] if self.root is not None else []
        while stack:
            idnum = stack.pop()
            if idnum in reachable or idnum not in self.objects:
                continue
            reachable.add(idnum)
            stack.extend(iter_references(self.objects[idnum]))
        dropped = sorted(set(self.objects) - reachable)
        for idnum in dropped:
            del self.objects[idnum]
        return dropped

    def compress(self) -> None:
        """Flate-encode every stream that carries no filter yet."""
        for idnum, obj in list(self.objects.items()):
            if not isinstance(obj, StreamObject) or "/Filter" in obj or "/DecodeParms" in obj:
                continue
            encoded = obj.flate_encode()
            for key in obj:
                if key not in encoded and key != "/Length":
                    encoded[key] = obj.raw_get(key)
            self.objects[idnum] = encoded

    def to_bytes(self) -> bytes:
        """Serialize the arena as a classic PDF file with a cross-reference table."""
        if self.root is None or self.root not in self.objects:
            raise NoCatalogFound("Catalog root not found.")
        out = io.BytesIO()
        out.write(PDF_HEADER)
        offsets: dict[int, int] = {}
        for idnum in sorted(self.objects):
            offsets[idnum] = out.tell()
            out.write(f"{idnum} 0 obj\n".encode("ascii"))
            self.objects[idnum].write_to_stream(out)
            out.write(b"\nendobj\n")

        size = max(offsets) + 1
        xref_offset = out.tell()
        out.write(f"xref\n0 {size}\n".encode("ascii"))
        out.write(b"0000000000 65535 f \n")
        for idnum in range(1, size):
            if idnum in offsets:
                out.write(f"{offsets[idnum]:010d} 00000 n \n".encode("ascii"))
            else:
                out.write(b"0000000000 00001 f \n")

        trailer = DictionaryObject(
            {
                NameObject("/Size"): NumberObject(size),
                NameObject("/Root"): self.reference(self.root),
            }
        )
        out.write(b"trailer\n")
        trailer.write_to_stream(out)
        out.write(f"\nstartxref\n{xref_offset}\n%%EOF\n".encode("ascii"))
        return out.getvalue()

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.to_bytes())
        logger.info("Wrote %s", path)


def _object_numbers(reader: PdfReader) -> list[tuple[int, int]]:
    """(object number, generation) of every in-use object listed by the reader."""
    numbers: dict[int, int] = {}
    for generation, entries in reader.xref.items():
        free = reader.xref_free_entry.get(generation, {})
        for idnum in entries:
            if idnum == 0 or free.get(idnum, False):
                continue
            numbers[idnum] = generation
    for idnum in reader.xref_objStm:
        numbers.setdefault(idnum, 0)
    return sorted(numbers.items())


def write_document(document: PageDocument, path: Path) -> None:
    """Write a merged document; unreachable objects are dropped first."""
    document.prune_objects()
    document.save(path)
