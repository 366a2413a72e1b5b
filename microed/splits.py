"""A tree of window splits: each leaf is a pane showing one buffer."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import IntEnum

_ids = itertools.count(1)


def new_id() -> int:
    """Return a new, never used split id (ids start at 1)."""
    return next(_ids)


class SplitType(IntEnum):
    """How a node lays out its children."""

    VERT = 0
    HORIZ = 1
    UNDEF = 2


@dataclass
class View:
    """Location and size of a split."""

    x: int
    y: int
    w: int
    h: int


def _trunc_div(a: int, b: int) -> int:
    return int(a / b)


class Node:
    """A split in the tree.

    A leaf node is a pane showing a buffer; any other node holds children of
    the opposite kind (vertical splits have horizontal children and the
    other way round).
    """

    def __init__(
        self,
        kind: SplitType,
        x: int,
        y: int,
        w: int,
        h: int,
        parent: Node | None,
        node_id: int,
    ) -> None:
        self.kind = SplitType(kind)
        self.x, self.y, self.w, self.h = x, y, w, h
        self.parent = parent
        self._children: list[Node] = []
        # Edge splits may be marked as not resizable when the screen changes.
        self.can_resize = True
        # Proportionally scaled splits keep their share of the parent.
        self.prop_scale = True
        self._id = node_id
        if parent is not None:
            self.prop_w = w / parent.w
            self.prop_h = h / parent.h
        else:
            self.prop_w = self.prop_h = 1.0

    @property
    def id(self) -> int:
        """This node's id, or 0 if it is not a leaf and so not viewable."""
        return self._id if self.is_leaf() else 0

    @property
    def children(self) -> tuple[Node, ...]:
        return tuple(self._children)

    @property
    def view(self) -> View:
        return View(self.x, self.y, self.w, self.h)

    def is_leaf(self) -> bool:
        return not self._children

    def get_node(self, node_id: int) -> Node | None:
        """Find the leaf with the given id below (or at) this node."""
        if self._id == node_id and self.is_leaf():
            return self
        for child in self._children:
            if child._id == node_id and child.is_leaf():
                return child
            found = child.get_node(node_id)
            if found is not None:
                return found
        return None

    def _index_in_parent(self) -> int:
        if self.parent is None:
            raise ValueError("the root split has no parent")
        index = 0
        for i, child in enumerate(self.parent._children):
            if child._id == self._id:
                index = i
        return index

    def _neighbours(self, i: int) -> tuple[Node, Node]:
        if i == len(self._children) - 1:
            return self._children[i - 1], self._children[i]
        return self._children[i], self._children[i + 1]

    def _v_resize_split(self, i: int, size: int) -> bool:
        if not 0 <= i < len(self._children):
            return False
        c1, c2 = self._neighbours(i)
        total = c1.h + c2.h
        if size >= total:
            return False
        c2.y = c1.y + size
        c1.resize(c1.w, size)
        c2.resize(c2.w, total - size)
        self._mark_sizes()
        self._align_sizes(self.w, self.h)
        return True

    def _h_resize_split(self, i: int, size: int) -> bool:
        if not 0 <= i < len(self._children):
            return False
        c1, c2 = self._neighbours(i)
        total = c1.w + c2.w
        if size >= total:
            return False
        c2.x = c1.x + size
        c1.resize(size, c1.h)
        c2.resize(total - size, c2.h)
        self._mark_sizes()
        self._align_sizes(self.w, self.h)
        return True

    def resize_split(self, size: int) -> bool:
        """Resize this split to ``size``; False if that is not possible."""
        if size <= 0:
            return False
        if self.parent is None:
            raise ValueError("the root split cannot be resized as a split")
        if len(self.parent._children) <= 1:
            return False
        index = self._index_in_parent()
        if self.parent.kind == SplitType.VERT:
            return self.parent._v_resize_split(index, size)
        return self.parent._h_resize_split(index, size)

    def resize(self, w: int, h: int) -> None:
        """Set this node's size and resize all children to match."""
        self.w, self.h = w, h
        if self.is_leaf():
            return
        x, y = self.x, self.y
        total_w = total_h = 0
        for child in self._children:
            child_w = int(w * child.prop_w)
            child_h = int(h * child.prop_h)
            child.x, child.y = x, y
            child.resize(child_w, child_h)
            if self.kind == SplitType.HORIZ:
                x += child_w
                total_w += child_w
            else:
                y += child_h
                total_h += child_h
        self._align_sizes(total_w, total_h)

    def _align_sizes(self, total_w: int, total_h: int) -> None:
        # Let the last split absorb rounding so the parent is filled exactly.
        if self.kind == SplitType.VERT and total_h != self.h:
            last = self._children[-1]
            last.resize(last.w, last.h + self.h - total_h)
        elif self.kind == SplitType.HORIZ and total_w != self.w:
            last = self._children[-1]
            last.resize(last.w + self.w - total_w, last.h)

    def _mark_sizes(self) -> None:
        for child in self._children:
            child.prop_w = child.w / self.w
            child.prop_h = child.h / self.h
            child._mark_sizes()

    def _mark_resize(self) -> None:
        self._mark_sizes()
        self.resize(self.w, self.h)

    def _resize_info(self, vertical: bool) -> tuple[int, int]:
        """Size of the non-resizable area and the number of resizable splits."""
        resizable = fixed = fixed_size = 0
        for child in self._children:
            if child.can_resize:
                resizable += 1
            else:
                fixed_size += child.h if vertical else child.w
                fixed += 1
        if resizable == 0:
            resizable = fixed
        return fixed_size, resizable

    def _apply_new_size(self, size: int, vertical: bool) -> None:
        pos = self.y if vertical else self.x
        for child in self._children:
            if vertical:
                child.y = pos
            else:
                child.x = pos
            if child.can_resize:
                if vertical:
                    child.resize(child.w, size)
                else:
                    child.resize(size, child.h)
            pos += child.h if vertical else child.w
        self._mark_resize()

    def _v_vsplit(self, right: bool) -> int:
        return self.parent._h_vsplit(self._index_in_parent(), right)

    def _h_hsplit(self, bottom: bool) -> int:
        return self.parent._v_hsplit(self._index_in_parent(), bottom)

    def _v_hsplit(self, i: int, bottom: bool) -> int:
        newid = new_id()
        if self.is_leaf():
            top = Node(SplitType.HORIZ, self.x, self.y, self.w, self.h // 2, self, self._id)
            below = Node(
                SplitType.HORIZ, self.x, self.y + top.h, self.w, self.h // 2, self, newid
            )
            if not bottom:
                top._id, below._id = below._id, top._id
            self._children.extend((top, below))
            self._mark_resize()
            return newid
        fixed_size, resizable = self._resize_info(True)
        height = _trunc_div(self.h - fixed_size, resizable + 1)
        node = Node(SplitType.HORIZ, self.x, 0, self.w, height, self, newid)
        self._children.insert(i + 1 if bottom else i, node)
        self._apply_new_size(height, True)
        return newid

    def _h_vsplit(self, i: int, right: bool) -> int:
        newid = new_id()
        if self.is_leaf():
            left = Node(SplitType.VERT, self.x, self.y, self.w // 2, self.h, self, self._id)
            other = Node(
                SplitType.VERT, self.x + left.w, self.y, self.w // 2, self.h, self, newid
            )
            if not right:
                left._id, other._id = other._id, left._id
            self._children.extend((left, other))
            self._mark_resize()
            return newid
        fixed_size, resizable = self._resize_info(False)
        width = _trunc_div(self.w - fixed_size, resizable + 1)
        node = Node(SplitType.VERT, 0, self.y, width, self.h, self, newid)
        self._children.insert(i + 1 if right else i, node)
        self._apply_new_size(width, False)
        return newid

    def hsplit(self, bottom: bool) -> int:
        """Split horizontally; return the new split's id, or 0 if not a leaf."""
        if not self.is_leaf():
            return 0
        if self.kind == SplitType.UNDEF:
            self.kind = SplitType.VERT
        if self.kind == SplitType.VERT:
            return self._v_hsplit(0, bottom)
        return self._h_hsplit(bottom)

    def vsplit(self, right: bool) -> int:
        """Split vertically; return the new split's id, or 0 if not a leaf."""
        if not self.is_leaf():
            return 0
        if self.kind == SplitType.UNDEF:
            self.kind = SplitType.HORIZ
        if self.kind == SplitType.VERT:
            return self._v_vsplit(right)
        return self._h_vsplit(0, right)

    def _unsplit_child(self, i: int, vertical: bool) -> None:
        del self._children[i]
        fixed_size, resizable = self._resize_info(vertical)
        if resizable == 0:
            # The last child is gone; the parent cleans this node up.
            return
        total = self.h if vertical else self.w
        self._apply_new_size(_trunc_div(total - fixed_size, resizable), vertical)

    def unsplit(self) -> bool:
        """Remove this leaf and resize its siblings to fill the space."""
        if not self.is_leaf() or self.parent is None:
            return False
        index = self._index_in_parent()
        self.parent._unsplit_child(index, self.parent.kind == SplitType.VERT)
        if self.parent.is_leaf():
            return self.parent.unsplit()
        return True

    def __str__(self) -> str:
        return "".join(self._lines(0))

    def _lines(self, indent: int):
        marker = "-" if self.kind == SplitType.HORIZ else "|"
        line = f"{chr(9) * indent}{marker}{{{self.x} {self.y} {self.w} {self.h}}} {self._id}"
        if self.is_leaf():
            line += "\N{MAPLE LEAF}"
        yield line + "\n"
        for child in self._children:
            yield from child._lines(indent + 1)


def new_root(x: int, y: int, w: int, h: int) -> Node:
    """An empty root split; its kind is fixed by the first split made on it."""
    return Node(SplitType.UNDEF, x, y, w, h, None, new_id())