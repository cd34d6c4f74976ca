"""
Module: geometry

Purpose:
    Value types consumed and produced by the grid partition engine:
    source dimensions, tile aspect ratio, layout parameters and the
    integer crop rectangles that tile one horizontal row of the source.

Key Classes:
    - ImageSize: True pixel dimensions of the source image
    - AspectRatio: Width:height of one output tile
    - LayoutParameters: User-chosen layout, already normalised to ratios
    - CropRectangle: Integer crop region in source-pixel space
    - CropSequence: Ordered, contiguous row of CropRectangle values

Dependencies:
    - dataclasses (std)
    - PIL.Image (TYPE_CHECKING only)

Used By:
    - geometry.resolver
    - export.codec, export.pipeline

Invariants:
    Every model validates on construction and is frozen. A CropSequence
    refuses rectangles that are not contiguous left-to-right or that do
    not share the same row (y and height).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Sequence, Tuple, Union, overload

if TYPE_CHECKING:
    from PIL import Image


def _require_int(field: str, value: object) -> None:
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field} must be an int: {value!r}")


def _require_number(field: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field} must be a number: {value!r}")


@dataclass(frozen=True, slots=True)
class ImageSize:
    """
    Pixel dimensions of the original source image.

    Must be the asset's true dimensions, never a display-scaled preview
    size: every rectangle is computed in this coordinate space.

    Example:
        >>> ImageSize(1200, 1600).aspect
        0.75
    """

    width: int
    height: int

    def __post_init__(self) -> None:
        _require_int("width", self.width)
        _require_int("height", self.height)
        if self.width <= 0:
            raise ValueError(f"width must be > 0: {self.width}")
        if self.height <= 0:
            raise ValueError(f"height must be > 0: {self.height}")

    @property
    def aspect(self) -> float:
        """width / height."""
        return self.width / self.height

    @classmethod
    def of(cls, image: Image.Image) -> ImageSize:
        """Size of an already decoded PIL image."""
        return cls(image.width, image.height)

    def __repr__(self) -> str:
        return f"ImageSize({self.width}x{self.height})"


@dataclass(frozen=True, slots=True)
class AspectRatio:
    """
    Width:height of a single output tile.

    The UI offers a fixed set (3:4, 4:5, 1:1) but any positive ratio is
    accepted here.
    """

    numerator: int
    denominator: int

    def __post_init__(self) -> None:
        _require_int("numerator", self.numerator)
        _require_int("denominator", self.denominator)
        if self.numerator <= 0:
            raise ValueError(f"numerator must be > 0: {self.numerator}")
        if self.denominator <= 0:
            raise ValueError(f"denominator must be > 0: {self.denominator}")

    @property
    def value(self) -> float:
        return self.numerator / self.denominator

    @classmethod
    def parse(cls, text: str) -> AspectRatio:
        """
        Parse ``"W:H"`` (``"W/H"`` and ``"WxH"`` are accepted too).

        Raises:
            ValueError: If the text is not two positive integers.

        Example:
            >>> AspectRatio.parse("4:5")
            AspectRatio(4:5)
        """
        for sep in (":", "/", "x"):
            if sep in text:
                left, _, right = text.partition(sep)
                try:
                    return cls(int(left.strip()), int(right.strip()))
                except ValueError as e:
                    raise ValueError(f"Invalid aspect ratio {text!r}: {e}") from e
        raise ValueError(f"Invalid aspect ratio {text!r} (expected 'W:H')")

    def __str__(self) -> str:
        return f"{self.numerator}:{self.denominator}"

    def __repr__(self) -> str:
        return f"AspectRatio({self})"


@dataclass(frozen=True, slots=True)
class LayoutParameters:
    """
    Layout chosen by the user, normalised for the resolver.

    Offsets are fractions of the preview extent so they are independent
    of the preview's resolution; the resolver converts them into source
    pixels and clamps them.

    Attributes:
        split_count: Number of tiles in the row (>= 2)
        aspect_ratio: Target aspect of each tile
        scale_percent: Multiplier on the maximum tile size, in (0, 1]
        vertical_offset_ratio: Top of the grid as a fraction of height, [0, 1]
        horizontal_offset_ratio: Left of the grid as a fraction of width, [0, 1]
    """

    split_count: int
    aspect_ratio: AspectRatio
    scale_percent: float = 1.0
    vertical_offset_ratio: float = 0.0
    horizontal_offset_ratio: float = 0.0

    def __post_init__(self) -> None:
        _require_int("split_count", self.split_count)
        if not isinstance(self.aspect_ratio, AspectRatio):
            raise ValueError(f"aspect_ratio must be an AspectRatio: {self.aspect_ratio!r}")
        for name in ("scale_percent", "vertical_offset_ratio", "horizontal_offset_ratio"):
            _require_number(name, getattr(self, name))
        if self.split_count < 2:
            raise ValueError(f"split_count must be >= 2: {self.split_count}")
        if not 0.0 < self.scale_percent <= 1.0:
            raise ValueError(f"scale_percent must be in (0, 1]: {self.scale_percent}")
        if not 0.0 <= self.vertical_offset_ratio <= 1.0:
            raise ValueError(
                f"vertical_offset_ratio must be in [0, 1]: {self.vertical_offset_ratio}"
            )
        if not 0.0 <= self.horizontal_offset_ratio <= 1.0:
            raise ValueError(
                f"horizontal_offset_ratio must be in [0, 1]: {self.horizontal_offset_ratio}"
            )


@dataclass(frozen=True, slots=True)
class CropRectangle:
    """
    Axis-aligned crop region in source-pixel space.

    The region is [x, x + width) x [y, y + height).

    Invariants:
        - x >= 0, y >= 0
        - width > 0, height > 0
    """

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        for name in ("x", "y", "width", "height"):
            _require_int(name, getattr(self, name))
        if self.x < 0:
            raise ValueError(f"x must be >= 0: {self.x}")
        if self.y < 0:
            raise ValueError(f"y must be >= 0: {self.y}")
        if self.width <= 0:
            raise ValueError(f"width must be > 0: {self.width}")
        if self.height <= 0:
            raise ValueError(f"height must be > 0: {self.height}")

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def right(self) -> int:
        """Exclusive right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """Exclusive bottom edge."""
        return self.y + self.height

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    def contained_in(self, size: ImageSize) -> bool:
        """True if the rectangle lies fully inside an image of ``size``."""
        return self.right <= size.width and self.bottom <= size.height

    def as_box(self) -> Tuple[int, int, int, int]:
        """(left, top, right, bottom) tuple suitable for ``Image.crop``."""
        return (self.x, self.y, self.right, self.bottom)

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict) -> CropRectangle:
        return cls(
            x=data["x"],
            y=data["y"],
            width=data["width"],
            height=data["height"],
        )

    def __repr__(self) -> str:
        return f"CropRectangle({self.x}, {self.y}, {self.width}, {self.height})"


class CropSequence(Sequence[CropRectangle]):
    """
    Ordered row of crop rectangles, left to right.

    Validated on construction:
        - at least one rectangle
        - rect[i].right == rect[i + 1].x (no gaps, no overlap)
        - identical y and height across the row

    Example:
        >>> seq = CropSequence([CropRectangle(0, 0, 300, 375),
        ...                     CropRectangle(300, 0, 300, 375)])
        >>> seq.total_width
        600
    """

    __slots__ = ("_rects",)

    def __init__(self, rectangles: Sequence[CropRectangle]):
        rects = tuple(rectangles)
        if not rects:
            raise ValueError("CropSequence requires at least one rectangle")
        first = rects[0]
        for i in range(len(rects) - 1):
            current, nxt = rects[i], rects[i + 1]
            if current.right != nxt.x:
                raise ValueError(
                    f"Rectangles {i} and {i + 1} are not contiguous: "
                    f"{current.right} != {nxt.x}"
                )
        for i, rect in enumerate(rects):
            if rect.y != first.y or rect.height != first.height:
                raise ValueError(
                    f"Rectangle {i} leaves the row: y={rect.y} height={rect.height}, "
                    f"expected y={first.y} height={first.height}"
                )
        self._rects = rects

    @overload
    def __getitem__(self, index: int) -> CropRectangle: ...

    @overload
    def __getitem__(self, index: slice) -> Tuple[CropRectangle, ...]: ...

    def __getitem__(self, index: Union[int, slice]):
        return self._rects[index]

    def __len__(self) -> int:
        return len(self._rects)

    def __iter__(self) -> Iterator[CropRectangle]:
        return iter(self._rects)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CropSequence):
            return self._rects == other._rects
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._rects)

    @property
    def total_width(self) -> int:
        """Sum of tile widths (equals right edge of last minus x of first)."""
        return self._rects[-1].right - self._rects[0].x

    @property
    def bounding_box(self) -> CropRectangle:
        """Single rectangle covering the whole row."""
        first = self._rects[0]
        return CropRectangle(first.x, first.y, self.total_width, first.height)

    def contained_in(self, size: ImageSize) -> bool:
        return self.bounding_box.contained_in(size)

    def to_list(self) -> list[dict]:
        return [r.to_dict() for r in self._rects]

    def __repr__(self) -> str:
        return f"CropSequence({list(self._rects)!r})"
