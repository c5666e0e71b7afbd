"""**********************************************************************************
 * Title: deductions.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Value types passed between the technique detectors and the main solver.
 * A deduction is a locally proven constraint on some cells; a Hint is the one
 * validated move the solver hands back to the caller. Deductions are frozen
 * dataclasses so the utilities can compare and key them freely.
 **********************************************************************************"""

# --- IMPORTS ---
import itertools
from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Optional, Tuple

from starbattle_hints.constants import (
    KIND_CELL, KIND_AREA, KIND_BLOCK, KIND_EXCLUSIVE_SET, KIND_AREA_RELATION,
    HINT_PLACE_STAR, HINT_PLACE_CROSS, MARK_STAR, MARK_CROSS
)

Cell = Tuple[int, int]

_hint_counter = itertools.count(1)


def next_hint_id():
    """Returns the next process-wide hint id, e.g. 'hint-7'."""
    return f"hint-{next(_hint_counter)}"


# --- DEDUCTION KINDS ---
@dataclass(frozen=True)
class CellDeduction:
    cell: Cell
    mark: str  # MARK_STAR or MARK_CROSS
    technique: str
    explanation: str = ''

    kind: ClassVar[str] = KIND_CELL


@dataclass(frozen=True)
class AreaDeduction:
    """
    Bounds on how many stars a row, column or region holds among its
    candidate cells. Bounds count stars already placed in the candidates as
    well as the ones still to come.
    """
    area_type: str
    area_id: int
    candidate_cells: Tuple[Cell, ...]
    technique: str
    explanation: str = ''
    min_stars: Optional[int] = None
    max_stars: Optional[int] = None
    stars_required: Optional[int] = None

    kind: ClassVar[str] = KIND_AREA


@dataclass(frozen=True)
class BlockDeduction:
    """
    Bounds on a 2x2 block. Coarse techniques report the block on a
    half-resolution grid; cell-granular techniques report its top-left cell.
    """
    block: Cell
    technique: str
    explanation: str = ''
    min_stars: Optional[int] = None
    max_stars: Optional[int] = None
    stars_required: Optional[int] = None

    kind: ClassVar[str] = KIND_BLOCK


@dataclass(frozen=True)
class ExclusiveSetDeduction:
    cells: Tuple[Cell, ...]
    stars_required: int
    technique: str
    explanation: str = ''

    kind: ClassVar[str] = KIND_EXCLUSIVE_SET


@dataclass(frozen=True)
class AreaSpec:
    area_type: str
    area_id: int
    candidate_cells: Tuple[Cell, ...]


@dataclass(frozen=True)
class AreaRelationDeduction:
    areas: Tuple[AreaSpec, ...]
    total_stars: int
    technique: str
    explanation: str = ''

    kind: ClassVar[str] = KIND_AREA_RELATION


# --- HINTS ---
@dataclass
class Hint:
    id: str
    kind: str
    technique: str
    result_cells: List[Cell]
    explanation: str
    details: Dict = field(default_factory=dict)
    highlights: Optional[Dict] = None
    schema_cell_types: Optional[Dict[Cell, str]] = None

    def mark_for(self, cell):
        """The mark this hint puts on `cell` ('star' or 'cross')."""
        if self.schema_cell_types and cell in self.schema_cell_types:
            return self.schema_cell_types[cell]
        return MARK_STAR if self.kind == HINT_PLACE_STAR else MARK_CROSS

    def to_dict(self):
        data = {
            'id': self.id,
            'kind': self.kind,
            'technique': self.technique,
            'resultCells': [[r, c] for r, c in self.result_cells],
            'explanation': self.explanation,
            'details': self.details,
        }
        if self.highlights:
            data['highlights'] = {key: [list(v) if isinstance(v, tuple) else v for v in values]
                                  for key, values in self.highlights.items()}
        if self.schema_cell_types:
            data['schemaCellTypes'] = {f"{r},{c}": mark for (r, c), mark in self.schema_cell_types.items()}
        return data

    @classmethod
    def from_dict(cls, data):
        """Rebuilds a hint sent back by a client, as produced by to_dict."""
        schema = data.get('schemaCellTypes')
        if schema:
            schema = {tuple(int(v) for v in key.split(',')): mark for key, mark in schema.items()}
        return cls(
            id=data.get('id', 'client'),
            kind=data['kind'],
            technique=data.get('technique', ''),
            result_cells=[tuple(cell) for cell in data['resultCells']],
            explanation=data.get('explanation', ''),
            details=data.get('details') or {},
            schema_cell_types=schema or None,
        )


def make_hint(kind, technique, cells, explanation, details=None, highlights=None,
              schema_cell_types=None):
    return Hint(
        id=next_hint_id(),
        kind=kind,
        technique=technique,
        result_cells=list(cells),
        explanation=explanation,
        details=dict(details or {}),
        highlights=highlights,
        schema_cell_types=schema_cell_types,
    )


def hint_kind_for_mark(mark):
    return HINT_PLACE_STAR if mark == MARK_STAR else HINT_PLACE_CROSS


@dataclass
class TechniqueResult:
    """What a detector returns: an optional ready-made hint plus deductions."""
    hint: Optional[Hint] = None
    deductions: List = field(default_factory=list)
