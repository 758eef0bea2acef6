"""Sensor region layouts: which grid cells belong to which body region."""

from typing import Iterator, Mapping, Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from graphene_trace.core.types import RegionDefinition
from graphene_trace.core.errors import ConfigurationError
from graphene_trace.core.constants import (
    BODY_REGION_ROWS,
    DEFAULT_GRID_ROWS,
    DEFAULT_GRID_COLS,
)

Band = Union[tuple[float, float], tuple[float, float, float, float]]


class RegionLayout:
    """Immutable, validated set of regions for one sensor resolution.

    The layout uses the same coordinate system as the sensor mat:
    - Row 0 is at the head end, the last row at the feet
    - Column 0 is on the patient's left

    A layout is built once per sensor type and shared read-only by every
    patient using that sensor.

    Attributes:
        rows: Number of sensor rows
        cols: Number of sensor columns
        name: Optional layout name
    """

    def __init__(
        self,
        rows: int,
        cols: int,
        regions: Sequence[RegionDefinition],
        name: str = "",
    ):
        """Initialize and validate a region layout.

        Args:
            rows: Sensor grid rows
            cols: Sensor grid columns
            regions: Region definitions, in reporting order
            name: Layout name

        Raises:
            ConfigurationError: If dimensions, names or cells are invalid
        """
        if int(rows) <= 0 or int(cols) <= 0:
            raise ConfigurationError(f"grid dimensions must be positive, got {rows}x{cols}")
        if not regions:
            raise ConfigurationError("layout must define at least one region")

        self._rows = int(rows)
        self._cols = int(cols)
        self.name = name

        seen: set[str] = set()
        for region in regions:
            if not region.name:
                raise ConfigurationError("region names must be non-empty")
            if region.name in seen:
                raise ConfigurationError(f"duplicate region name '{region.name}'")
            if not region.cells:
                raise ConfigurationError(f"region '{region.name}' covers no cells")
            seen.add(region.name)

        self._regions = tuple(regions)
        self.check_fits((self._rows, self._cols))

        # Fancy-index arrays per region, computed once
        self._indices: dict[str, tuple[NDArray[np.intp], NDArray[np.intp]]] = {}
        for region in self._regions:
            cells = np.asarray(region.cells, dtype=np.intp)
            row_idx, col_idx = cells[:, 0].copy(), cells[:, 1].copy()
            row_idx.setflags(write=False)
            col_idx.setflags(write=False)
            self._indices[region.name] = (row_idx, col_idx)

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def shape(self) -> tuple[int, int]:
        """Sensor grid dimensions (rows, cols)."""
        return (self._rows, self._cols)

    @property
    def regions(self) -> tuple[RegionDefinition, ...]:
        """Region definitions in reporting order."""
        return self._regions

    @property
    def region_names(self) -> list[str]:
        """Region names in reporting order."""
        return [r.name for r in self._regions]

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[RegionDefinition]:
        return iter(self._regions)

    def __repr__(self) -> str:
        return (
            f"RegionLayout(name={self.name!r}, shape={self.shape}, "
            f"regions={self.region_names})"
        )

    def get(self, name: str) -> Optional[RegionDefinition]:
        """Get region definition by name."""
        for region in self._regions:
            if region.name == name:
                return region
        return None

    def indices(self, name: str) -> tuple[NDArray[np.intp], NDArray[np.intp]]:
        """Row and column index arrays for a region.

        Raises:
            KeyError: If the region is not part of this layout
        """
        return self._indices[name]

    def mask(self, name: str) -> NDArray[np.bool_]:
        """Boolean grid mask of the cells covered by a region."""
        mask = np.zeros(self.shape, dtype=bool)
        mask[self.indices(name)] = True
        return mask

    def check_fits(self, shape: tuple[int, ...]) -> None:
        """Verify every region cell lies inside a grid of the given shape.

        Args:
            shape: Declared grid dimensions (rows, cols)

        Raises:
            ConfigurationError: If any region coordinate is out of bounds
        """
        if len(shape) != 2:
            raise ConfigurationError(f"grid must be 2D, got shape {shape}")
        rows, cols = shape
        for region in self._regions:
            for r, c in region.cells:
                if not (0 <= r < rows and 0 <= c < cols):
                    raise ConfigurationError(
                        f"region '{region.name}' cell ({r}, {c}) lies outside "
                        f"{rows}x{cols} grid"
                    )

    # Constructors

    @classmethod
    def from_row_bands(
        cls,
        rows: int,
        cols: int,
        bands: Mapping[str, Band],
        name: str = "",
    ) -> "RegionLayout":
        """Build a layout from fractional bands of the sensor mat.

        Args:
            rows: Sensor grid rows
            cols: Sensor grid columns
            bands: Region name -> (row_start, row_end) or
                (row_start, row_end, col_start, col_end), as fractions of
                the mat (head=0, left=0); end bounds are exclusive
            name: Layout name

        Returns:
            Validated layout
        """
        regions = []
        for region_name, band in bands.items():
            if len(band) == 2:
                row_start, row_end = band
                col_start, col_end = 0.0, 1.0
            elif len(band) == 4:
                row_start, row_end, col_start, col_end = band
            else:
                raise ConfigurationError(
                    f"band for region '{region_name}' must have 2 or 4 values"
                )

            for frac in (row_start, row_end, col_start, col_end):
                if not 0.0 <= frac <= 1.0:
                    raise ConfigurationError(
                        f"band fractions for region '{region_name}' must be in [0, 1]"
                    )

            r0, r1 = int(row_start * rows), int(row_end * rows)
            c0, c1 = int(col_start * cols), int(col_end * cols)
            cells = [(r, c) for r in range(r0, r1) for c in range(c0, c1)]
            regions.append(RegionDefinition(region_name, tuple(cells)))

        return cls(rows, cols, regions, name=name)

    @classmethod
    def from_masks(
        cls,
        masks: Mapping[str, NDArray[np.bool_]],
        name: str = "",
    ) -> "RegionLayout":
        """Build a layout from boolean masks of identical shape.

        Args:
            masks: Region name -> boolean grid mask
            name: Layout name

        Returns:
            Validated layout
        """
        if not masks:
            raise ConfigurationError("layout must define at least one region")

        shapes = {np.asarray(m).shape for m in masks.values()}
        if len(shapes) != 1:
            raise ConfigurationError(f"region masks have differing shapes: {shapes}")
        shape = shapes.pop()
        if len(shape) != 2:
            raise ConfigurationError(f"region masks must be 2D, got shape {shape}")

        regions = [
            RegionDefinition(
                region_name,
                tuple((int(r), int(c)) for r, c in np.argwhere(np.asarray(mask, dtype=bool))),
            )
            for region_name, mask in masks.items()
        ]
        return cls(shape[0], shape[1], regions, name=name)

    @classmethod
    def body_layout(
        cls,
        rows: int = DEFAULT_GRID_ROWS,
        cols: int = DEFAULT_GRID_COLS,
    ) -> "RegionLayout":
        """Standard supine body layout split into head-to-heel row bands."""
        return cls.from_row_bands(rows, cols, BODY_REGION_ROWS, name="supine_body")
