import torch
import torch.nn as nn

from forecasting.preprocess import N_FEATURES


class ProjectionNet(nn.Module):
    def __init__(self, input_dim=N_FEATURES, hidden_dims=(16, 8)):
        super().__init__()
        h1, h2 = hidden_dims
        self.hidden1 = nn.Linear(input_dim, h1)
        self.hidden2 = nn.Linear(h1, h2)
        self.out = nn.Linear(h2, 1)
        self.act = nn.ReLU()

        for layer in (self.hidden1, self.hidden2):
            nn.init.kaiming_normal_(layer.weight, nonlinearity="relu")
            nn.init.zeros_(layer.bias)
        nn.init.xavier_uniform_(self.out.weight)
        nn.init.zeros_(self.out.bias)

    def forward(self, x):
        """
        x: (B, F)
        returns: (B, 1) normalized share of the historical maximum, unclamped
        """
        x = self.act(self.hidden1(x))   # (B, 16)
        x = self.act(self.hidden2(x))   # (B, 8)
        return self.out(x)              # (B, 1)
