"""
Biased matrix factorization trained with PyTorch.

Predictions follow ``mu + b_u + b_i + p_u . q_i``. After cleanup the learned
tables are copied into numpy arrays so evaluation does not go through autograd.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import torch
from loguru import logger
from torch import nn
from torch.utils.data import DataLoader

from reccore.data.datasets import RatingDataset

from .contract import ModelContext, Recommender


class BiasedMFModule(nn.Module):
    """Latent factors and biases for users and items around a fixed global mean."""

    def __init__(
        self,
        num_users: int,
        num_items: int,
        factors: int,
        *,
        global_mean: float = 0.0,
        init_std: float = 0.1,
    ) -> None:
        super().__init__()
        self.user_factors = nn.Embedding(num_users, factors)
        self.item_factors = nn.Embedding(num_items, factors)
        self.user_bias = nn.Embedding(num_users, 1)
        self.item_bias = nn.Embedding(num_items, 1)
        nn.init.normal_(self.user_factors.weight, mean=0.0, std=init_std)
        nn.init.normal_(self.item_factors.weight, mean=0.0, std=init_std)
        nn.init.zeros_(self.user_bias.weight)
        nn.init.zeros_(self.item_bias.weight)
        self.register_buffer("global_mean", torch.tensor(float(global_mean)))

    def forward(self, users: torch.Tensor, items: torch.Tensor) -> torch.Tensor:
        dot = (self.user_factors(users) * self.item_factors(items)).sum(dim=-1)
        return (
            self.global_mean
            + self.user_bias(users).squeeze(-1)
            + self.item_bias(items).squeeze(-1)
            + dot
        )

    def penalty(self, users: torch.Tensor, items: torch.Tensor) -> torch.Tensor:
        return (
            self.user_factors(users).pow(2).sum()
            + self.item_factors(items).pow(2).sum()
            + self.user_bias(users).pow(2).sum()
            + self.item_bias(items).pow(2).sum()
        )


@dataclass
class TrainingHistory:
    train_loss: list[float] = field(default_factory=list)


class BiasedMF(Recommender):
    """
    Matrix factorization with user and item biases.

    Hyper-parameters are read from ``mf.factors``, ``mf.num_epochs``,
    ``mf.learn_rate``, ``mf.reg``, ``mf.batch_size`` and ``mf.init_std``.
    """

    def __init__(self, context: ModelContext) -> None:
        self.context = context
        self.name = "BiasedMF"
        config = context.config
        self.factors = int(config.get("mf.factors", 10))
        self.num_epochs = int(config.get("mf.num_epochs", 20))
        self.learn_rate = float(config.get("mf.learn_rate", 0.01))
        self.regularization = float(config.get("mf.reg", 0.01))
        self.batch_size = int(config.get("mf.batch_size", 256))
        self.init_std = float(config.get("mf.init_std", 0.1))

        self.history = TrainingHistory()
        self.module: BiasedMFModule | None = None
        self.optimizer: torch.optim.Optimizer | None = None
        self.loader: DataLoader | None = None
        self._user_factors: np.ndarray | None = None
        self._item_factors: np.ndarray | None = None
        self._user_bias: np.ndarray | None = None
        self._item_bias: np.ndarray | None = None
        self._global_mean = context.global_mean

    @property
    def model_path(self) -> Path:
        suffix = f"-{self.context.fold}" if self.context.fold > 0 else ""
        return self.context.config.output_dir / f"{self.name}{suffix}.pt"

    def _build_module(self) -> BiasedMFModule:
        num_users, num_items = self.context.train_matrix.shape
        return BiasedMFModule(
            num_users,
            num_items,
            self.factors,
            global_mean=self.context.global_mean,
            init_std=self.init_std,
        )

    def initialize(self) -> None:
        self.module = self._build_module()
        self.optimizer = torch.optim.Adam(self.module.parameters(), lr=self.learn_rate)
        self.loader = DataLoader(
            RatingDataset(self.context.train_matrix),
            batch_size=self.batch_size,
            shuffle=True,
            drop_last=False,
        )

    def train(self) -> None:
        if self.module is None or self.optimizer is None or self.loader is None:
            raise RuntimeError("BiasedMF.train() called before initialize().")

        criterion = nn.MSELoss(reduction="sum")
        self.module.train()
        for epoch in range(1, self.num_epochs + 1):
            total_loss = 0.0
            total_samples = 0
            for users, items, ratings in self.loader:
                self.optimizer.zero_grad()
                preds = self.module(users, items)
                loss = criterion(preds, ratings)
                loss = loss + self.regularization * self.module.penalty(users, items)
                (loss / users.shape[0]).backward()
                self.optimizer.step()
                total_loss += float(loss.item())
                total_samples += int(users.shape[0])

            avg_loss = total_loss / max(total_samples, 1)
            self.history.train_loss.append(avg_loss)
            if self.context.config.verbose:
                logger.debug(
                    "{}{} epoch {:03d}/{:03d} | train_loss={:.6f}",
                    self.name,
                    self.context.fold_info,
                    epoch,
                    self.num_epochs,
                    avg_loss,
                )

    def cleanup(self) -> None:
        self._freeze()
        self.optimizer = None
        self.loader = None

    def _freeze(self) -> None:
        if self.module is None:
            return
        self.module.eval()
        with torch.no_grad():
            self._user_factors = self.module.user_factors.weight.detach().cpu().numpy().copy()
            self._item_factors = self.module.item_factors.weight.detach().cpu().numpy().copy()
            self._user_bias = self.module.user_bias.weight.detach().cpu().numpy().ravel().copy()
            self._item_bias = self.module.item_bias.weight.detach().cpu().numpy().ravel().copy()
            self._global_mean = float(self.module.global_mean.item())

    def predict(self, user: int, item: int) -> float:
        if self._user_factors is None:
            if self.module is None:
                return self.context.global_mean
            self._freeze()
        return float(
            self._global_mean
            + self._user_bias[user]
            + self._item_bias[item]
            + np.dot(self._user_factors[user], self._item_factors[item])
        )

    def persist(self) -> None:
        if self.module is None:
            raise RuntimeError("Nothing to persist: BiasedMF has not been trained.")
        path = self.model_path
        path.parent.mkdir(parents=True, exist_ok=True)
        torch.save(
            {
                "state_dict": self.module.state_dict(),
                "factors": self.factors,
                "loss_history": list(self.history.train_loss),
            },
            path,
        )
        logger.debug("{}{} saved model to {}", self.name, self.context.fold_info, path)

    def restore(self) -> None:
        path = self.model_path
        if not path.exists():
            raise FileNotFoundError(f"Expected saved model at {path} but file was not found.")
        payload = torch.load(path, map_location="cpu")
        self.factors = int(payload["factors"])
        self.module = self._build_module()
        self.module.load_state_dict(payload["state_dict"])
        self.history = TrainingHistory(train_loss=list(payload.get("loss_history", [])))
        self._freeze()
        logger.debug("{}{} restored model from {}", self.name, self.context.fold_info, path)
