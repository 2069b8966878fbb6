"""
Dataset wrapper for turning a sparse rating matrix into PyTorch-friendly tensors.
"""

from __future__ import annotations

import torch
from torch.utils.data import Dataset

from .sparse import SparseRatingMatrix


class RatingDataset(Dataset):
    """
    Observed ``(user, item, rating)`` triples of a rating matrix.

    Parameters
    ----------
    matrix:
        Training ratings; every stored entry becomes one sample.
    """

    def __init__(self, matrix: SparseRatingMatrix) -> None:
        coo = matrix.csr.tocoo()
        self._users = torch.as_tensor(coo.row, dtype=torch.long)
        self._items = torch.as_tensor(coo.col, dtype=torch.long)
        self._ratings = torch.as_tensor(coo.data, dtype=torch.float32)

    def __len__(self) -> int:
        return self._users.shape[0]

    def __getitem__(self, idx: int) -> tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        return self._users[idx], self._items[idx], self._ratings[idx]
