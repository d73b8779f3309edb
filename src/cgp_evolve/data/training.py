"""Training data ingestion for symbolic regression runs.

A training file is a delimited text file with one sample per row. The last
column is the target value, all other columns are program inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

import numpy as np


@dataclass
class TrainingData:
    """Input rows, targets and column labels read from a training file."""

    train: np.ndarray
    target: np.ndarray
    labels: List[str] = field(default_factory=list)

    @property
    def num_inputs(self) -> int:
        return self.train.shape[1]

    def __len__(self) -> int:
        return len(self.target)


def read_training_data(
    path: Union[str, Path],
    header: bool = True,
    sep: str = ",",
) -> TrainingData:
    """Read a training file.

    Args:
        path: File to read.
        header: Whether the first line holds column labels.
        sep: Column separator.

    Returns:
        TrainingData with a 2D ``train`` array and a 1D ``target`` array.
        Without a header, labels are ``x0`` .. ``x<n>`` (the last one names
        the target column).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file has no data rows, a single column, or
            values that are not numbers.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Training data not found: {path}")

    labels: List[str] = []
    with open(path) as f:
        if header:
            header_line = f.readline().strip()
            labels = header_line.replace('"', '').split(sep)
        data = np.loadtxt(f, delimiter=sep, ndmin=2)

    if data.shape[0] == 0:
        raise ValueError(f"No data rows in {path}")
    if data.shape[1] < 2:
        raise ValueError(f"Need at least one input and one target column in {path}")

    if not header:
        labels = [f"x{i}" for i in range(data.shape[1])]

    return TrainingData(train=data[:, :-1], target=data[:, -1], labels=labels)
