import logging
import random
from copy import deepcopy

import numpy as np
import torch
import torch.optim as optim

from .utils.loss import cox_loss

logger = logging.getLogger(__name__)


def set_seed(seed=42):
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)
        torch.backends.cudnn.deterministic = True
        torch.backends.cudnn.benchmark = False


class EarlyStopping:
    def __init__(self, patience=10, min_delta=1e-4):
        self.patience = patience
        self.min_delta = min_delta
        self.best_loss = np.inf
        self.counter = 0
        self.should_stop = False
        self.improved = False

    def step(self, val_loss):
        if val_loss < self.best_loss - self.min_delta:
            self.best_loss = val_loss
            self.counter = 0
            self.improved = True
        else:
            self.counter += 1
            self.improved = False
        if self.counter >= self.patience:
            self.should_stop = True


def train_model(model, train_loader, val_loader=None, num_epochs=100, learning_rate=1e-3,
                l1_reg=0.0, patience=10, ties="efron", verbose=True):
    """
    Fit a risk-score network by minimizing the Cox loss with an L1 penalty.

    Args:
        model: Network mapping features to one risk score per subject
        train_loader: DataLoader yielding (x, t, e, idx) batches
        val_loader: Optional DataLoader used for early stopping
        num_epochs: Maximum number of epochs
        learning_rate: Adam learning rate
        l1_reg: L1 penalty coefficient on the weights
        patience: Early stopping patience in epochs
        ties: Tie handling of the partial likelihood, "efron" or "breslow"
        verbose: Log the losses of every epoch

    Returns
    -------
        history: dict with lists "train_loss" and "val_loss". With a val_loader
        the weights of the epoch with the lowest validation loss are loaded
        back into the model before returning.
    """
    optimizer = optim.Adam(model.parameters(), lr=learning_rate)
    early_stopper = EarlyStopping(patience=patience)
    device = next(model.parameters()).device
    history = {"train_loss": [], "val_loss": []}
    best_state = None

    for epoch in range(num_epochs):
        model.train()
        total_loss = 0.0
        for x, t, e, _ in train_loader:
            x, t, e = x.to(device), t.to(device), e.to(device)
            risk_scores = model(x)
            total = cox_loss(risk_scores, t, e, model=model, l1_reg=l1_reg, ties=ties)

            optimizer.zero_grad()
            total.backward()
            optimizer.step()
            total_loss += total.item()

        avg_train_loss = total_loss / len(train_loader)
        history["train_loss"].append(avg_train_loss)

        if val_loader:
            model.eval()
            val_loss = 0.0
            with torch.no_grad():
                for x, t, e, _ in val_loader:
                    x, t, e = x.to(device), t.to(device), e.to(device)
                    risk_scores = model(x)
                    loss = cox_loss(risk_scores, t, e, model=model, l1_reg=l1_reg, ties=ties)
                    val_loss += loss.item()
            avg_val_loss = val_loss / len(val_loader)
            history["val_loss"].append(avg_val_loss)
            early_stopper.step(avg_val_loss)
            if early_stopper.improved:
                best_state = deepcopy(model.state_dict())

            if verbose:
                logger.info("Epoch %d | Train Loss: %.4f | Val Loss: %.4f",
                            epoch + 1, avg_train_loss, avg_val_loss)

            if early_stopper.should_stop:
                logger.info("Early stopping triggered after %d epochs.", epoch + 1)
                break
        elif verbose:
            logger.info("Epoch %d | Train Loss: %.4f", epoch + 1, avg_train_loss)

    if best_state is not None:
        model.load_state_dict(best_state)
        logger.info("Restored weights with validation loss %.4f", early_stopper.best_loss)
    return history
