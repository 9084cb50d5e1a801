"""Minimum edit distance and alignment between two sequences.

Works on any sequences whose items compare with ``==``: word tokens,
phonemes or plain characters.

The matrix has one row per destination prefix and one column per source
prefix, so ``matrix[i][j]`` is the number of single-item insertions,
deletions or substitutions needed to turn the first ``j`` source items
into the first ``i`` destination items.

Example:
    alignment = alignment_distance("ct is teh bestt".split(), "cat is the best".split())
    alignment.distance   # 3
    alignment.path       # [(3, 3), (2, 2), (0, 0)]
    for step in alignment.edits:
        print(step.kind, step.source_index, step.destination_index)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


class EditKind(str, Enum):
    """How one aligned step relates the source to the destination."""

    MATCH = "match"  # Items are equal, no cost
    SUBSTITUTION = "substitution"  # Source item replaced by destination item
    INSERTION = "insertion"  # Destination item with no source counterpart
    DELETION = "deletion"  # Source item with no destination counterpart


@dataclass(frozen=True)
class EditStep:
    """One step of an alignment, in reading order.

    Attributes:
        kind: Relation between the aligned items
        source_index: Index into the source, None for insertions
        destination_index: Index into the destination, None for deletions
    """

    kind: EditKind
    source_index: int | None
    destination_index: int | None

    @property
    def is_edit(self) -> bool:
        return self.kind is not EditKind.MATCH


@dataclass(frozen=True)
class Alignment(Generic[T]):
    """Result of aligning a source sequence against a destination.

    Attributes:
        source: Source items (columns of the matrix)
        destination: Destination items (rows of the matrix)
        matrix: ``(len(destination) + 1) x (len(source) + 1)`` distance grid
        distance: Edit distance between the full sequences
        path: One ``(row, column)`` pair per edit, in backtrace order from
            the bottom-right cell. Each pair holds the zero-based destination
            and source indices of the predecessor cell, clamped at 0.
        steps: Every aligned step in reading order, matches included
    """

    source: tuple[T, ...]
    destination: tuple[T, ...]
    matrix: list[list[int]]
    distance: int
    path: list[tuple[int, int]]
    steps: list[EditStep] = field(default_factory=list)

    @property
    def edits(self) -> list[EditStep]:
        """Steps that cost one edit, in reading order."""
        return [step for step in self.steps if step.is_edit]

    def __str__(self) -> str:
        width = max(
            [2]
            + [len(str(item)) for item in self.source]
            + [len(str(item)) for item in self.destination]
            + [len(str(self.distance))]
        )

        def cell(value: object) -> str:
            return str(value).ljust(width)

        lines = ["  ".join([cell(""), cell("")] + [cell(item) for item in self.source])]
        for i, row in enumerate(self.matrix):
            label = cell(self.destination[i - 1]) if i > 0 else cell("")
            lines.append("  ".join([label] + [cell(value) for value in row]))
        return "\n".join(line.rstrip() for line in lines)


def build_matrix(source: Sequence[T], destination: Sequence[T]) -> list[list[int]]:
    """Fill the full edit distance matrix.

    Args:
        source: Sequence along the columns
        destination: Sequence along the rows

    Returns:
        ``(len(destination) + 1) x (len(source) + 1)`` list of rows
    """
    rows = len(destination) + 1
    columns = len(source) + 1

    matrix = [[0] * columns for _ in range(rows)]
    for j in range(columns):
        matrix[0][j] = j
    for i in range(rows):
        matrix[i][0] = i

    for i in range(1, rows):
        above = matrix[i - 1]
        current = matrix[i]
        target = destination[i - 1]
        for j in range(1, columns):
            cost = 0 if target == source[j - 1] else 1
            current[j] = min(
                above[j] + 1,
                current[j - 1] + 1,
                above[j - 1] + cost,
            )

    return matrix


def backtrace(matrix: list[list[int]]) -> tuple[list[tuple[int, int]], list[EditStep]]:
    """Walk one minimum-cost route from the bottom-right cell to the origin.

    At each cell the left, above and diagonal neighbours are compared and
    the cheapest is taken. Ties go to the diagonal when both indices can
    still decrease, then to the left move, then to the move up.

    Returns:
        ``(path, steps)``: the edit coordinates in backtrace order and
        every step (matches included) in reading order
    """
    row = len(matrix) - 1
    column = len(matrix[0]) - 1
    score = matrix[row][column]

    path: list[tuple[int, int]] = []
    steps: list[EditStep] = []

    while row > 0 or column > 0:
        previous_row = row - 1 if row > 0 else 0
        previous_column = column - 1 if column > 0 else 0

        left = matrix[row][previous_column]
        above = matrix[previous_row][column]
        diagonal = matrix[previous_row][previous_column]
        best = min(left, above, diagonal)

        if score != best:
            path.append((previous_row, previous_column))

        if best == diagonal and row != previous_row and column != previous_column:
            kind = EditKind.MATCH if score == best else EditKind.SUBSTITUTION
            steps.append(EditStep(kind, previous_column, previous_row))
            row, column = previous_row, previous_column
        elif best == left and column != previous_column:
            steps.append(EditStep(EditKind.DELETION, previous_column, None))
            column = previous_column
        else:
            steps.append(EditStep(EditKind.INSERTION, None, previous_row))
            row = previous_row

        score = best

    steps.reverse()
    return path, steps


def alignment_distance(source: Sequence[T], destination: Sequence[T]) -> Alignment[T]:
    """Compute the edit distance and one optimal alignment.

    Runs in O(len(source) * len(destination)) time and memory; callers
    should split document-length input into sentences first.

    Args:
        source: Sequence to transform (e.g. recognizer hypothesis tokens)
        destination: Sequence to reach (e.g. reference sentence tokens)

    Returns:
        Alignment holding the matrix, distance, path and steps
    """
    source = tuple(source)
    destination = tuple(destination)

    matrix = build_matrix(source, destination)
    distance = matrix[-1][-1]
    path, steps = backtrace(matrix)

    return Alignment(
        source=source,
        destination=destination,
        matrix=matrix,
        distance=distance,
        path=path,
        steps=steps,
    )


def edit_distance(source: Sequence[T], destination: Sequence[T]) -> int:
    """Edit distance only, keeping two matrix rows in memory."""
    previous = list(range(len(source) + 1))
    for i, target in enumerate(destination, start=1):
        current = [i] + [0] * len(source)
        for j, item in enumerate(source, start=1):
            cost = 0 if target == item else 1
            current[j] = min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost)
        previous = current
    return previous[-1]
