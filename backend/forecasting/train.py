# backend/forecasting/train.py
import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import torch
import torch.nn as nn
from sklearn.metrics import mean_absolute_error, mean_squared_error
from torch.utils.data import DataLoader, Subset

from forecasting.dataset import FeatureDataset
from forecasting.errors import ModelDisposedError
from forecasting.model import ProjectionNet

logger = logging.getLogger(__name__)

EPOCHS = 100
BATCH_SIZE = 8
VALIDATION_SPLIT = 0.2
LEARNING_RATE = 0.01
LOG_EVERY = 20


@dataclass
class TrainingHistory:
    loss: List[float] = field(default_factory=list)
    val_loss: List[float] = field(default_factory=list)
    val_mae: List[float] = field(default_factory=list)

    @property
    def epochs(self) -> int:
        return len(self.loss)

    @property
    def final_val_mae(self) -> Optional[float]:
        if not self.val_mae or math.isnan(self.val_mae[-1]):
            return None
        return self.val_mae[-1]


class TrainedModel:
    """
    A fitted regressor with an explicit lifetime: the trainer creates it, the
    caller ends it with dispose() (or by leaving a `with` block).
    """

    def __init__(self, name: str, net: ProjectionNet, history: TrainingHistory):
        self.name = name
        self.history = history
        self._net: Optional[ProjectionNet] = net

    @property
    def disposed(self) -> bool:
        return self._net is None

    def predict(self, vector: np.ndarray) -> float:
        """vector: (F,) feature vector -> normalized prediction"""
        if self._net is None:
            raise ModelDisposedError(f"Model '{self.name}' has been disposed")

        x = torch.tensor(vector, dtype=torch.float32).reshape(1, -1)
        with torch.no_grad():
            y = self._net(x)
        value = float(y.item())
        del x, y
        return value

    def dispose(self) -> None:
        self._net = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()


def validation_split_index(n: int, validation_split: float = VALIDATION_SPLIT) -> int:
    """
    Number of leading examples used for training; the trailing rest is held out.
    Always keeps at least one training example.
    """
    split = math.floor(round(n * (1 - validation_split), 9))
    return max(1, min(split, n))


def _evaluate(model: nn.Module, loader: DataLoader):
    preds, targets = [], []
    with torch.no_grad():
        for X, y in loader:
            preds.append(model(X).squeeze(-1).numpy())
            targets.append(y.squeeze(-1).numpy())
    if not preds:
        return float("nan"), float("nan")
    preds = np.concatenate(preds)
    targets = np.concatenate(targets)
    return (
        float(mean_squared_error(targets, preds)),
        float(mean_absolute_error(targets, preds)),
    )


async def train_model(
    features: np.ndarray,
    labels: np.ndarray,
    *,
    name: str = "model",
    epochs: int = EPOCHS,
    batch_size: int = BATCH_SIZE,
    validation_split: float = VALIDATION_SPLIT,
    lr: float = LEARNING_RATE,
    seed: Optional[int] = None,
) -> TrainedModel:
    """
    Fit a fresh ProjectionNet to (features, labels).

    Runs the full epoch schedule; the held-out tail is only monitored and never
    stops training early. Yields to the event loop after every epoch.
    """
    generator = torch.Generator()
    if seed is not None:
        generator.manual_seed(seed)
    else:
        generator.seed()

    dataset = FeatureDataset(features, labels)
    n = len(dataset)
    split = validation_split_index(n, validation_split)

    train_loader = DataLoader(
        Subset(dataset, range(split)), batch_size=batch_size, shuffle=True, generator=generator
    )
    val_loader = DataLoader(Subset(dataset, range(split, n)), batch_size=batch_size, generator=generator)

    # seeded init must not disturb the process-wide RNG
    with torch.random.fork_rng(devices=[]):
        if seed is not None:
            torch.manual_seed(seed)
        model = ProjectionNet(input_dim=dataset.X.shape[1])
    loss_fn = nn.MSELoss()
    optimizer = torch.optim.Adam(model.parameters(), lr=lr)
    history = TrainingHistory()

    logger.debug("Training %s on %d examples (%d held out)", name, split, n - split)

    try:
        for epoch in range(epochs):
            model.train()
            total_loss = 0.0
            for X, y in train_loader:
                optimizer.zero_grad()
                loss = loss_fn(model(X), y)
                loss.backward()
                optimizer.step()
                total_loss += loss.item()
                del loss

            model.eval()
            val_loss, val_mae = _evaluate(model, val_loader)

            history.loss.append(total_loss / len(train_loader))
            history.val_loss.append(val_loss)
            history.val_mae.append(val_mae)

            if epoch % LOG_EVERY == 0:
                logger.debug(
                    "%s epoch %d: loss=%.4f, val_loss=%s",
                    name, epoch, history.loss[-1],
                    "N/A" if math.isnan(val_loss) else f"{val_loss:.4f}",
                )

            await asyncio.sleep(0)
    finally:
        dataset.release()

    model.eval()
    return TrainedModel(name, model, history)
