"""
backends/torch_backend.py — the NLL model with PyTorch.

Same model, same hyperparameters. PyTorch's autograd handles
backpropagation; the update is plain gradient descent so the loss
trajectory matches the scalar and NumPy versions.
Pass device='cpu' or device='cuda' to switch targets.
"""

import torch
import torch.nn.functional as F


class LinearSoftmaxTorch:

    def __init__(self, xs, ys, vocab_size, w, device="cpu"):
        self.V      = vocab_size
        self.device = torch.device(device)

        ids     = torch.tensor(xs, dtype=torch.long, device=self.device)
        self.X  = F.one_hot(ids, num_classes=vocab_size).to(torch.float64)   # [N, V]
        self.ys = torch.tensor(ys, dtype=torch.long, device=self.device)      # [N]
        self.W  = torch.tensor(w, dtype=torch.float64, device=self.device).requires_grad_(True)

        self._loss = self._forward()

    def _forward(self) -> torch.Tensor:
        logits = self.X @ self.W                                              # [N, V]
        return F.cross_entropy(logits, self.ys)

    @property
    def loss(self) -> float:
        return self._loss.item()

    def weight_matrix(self):
        return self.W.detach().cpu().tolist()

    def train_step(self, lr: float) -> float:
        """Backward + SGD step + forward. Returns scalar loss."""
        self.W.grad = None
        self._loss.backward()
        with torch.no_grad():
            self.W -= lr * self.W.grad
        self._loss = self._forward()
        return self._loss.item()
