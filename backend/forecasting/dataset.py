# backend/forecasting/dataset.py
import numpy as np
import torch
from torch.utils.data import Dataset


class FeatureDataset(Dataset):
    def __init__(self, features: np.ndarray, labels: np.ndarray):
        """
        features: numpy array (N, F)
        labels: numpy array (N,) normalized targets
        """
        if features.shape[0] != labels.shape[0]:
            raise ValueError(
                f"Feature/label length mismatch: {features.shape[0]} != {labels.shape[0]}"
            )
        self.X = torch.tensor(features, dtype=torch.float32)
        self.y = torch.tensor(labels, dtype=torch.float32).unsqueeze(-1)  # (N, 1)

    def __len__(self):
        return self.X.shape[0]

    def __getitem__(self, i):
        return self.X[i], self.y[i]

    def release(self):
        del self.X, self.y
