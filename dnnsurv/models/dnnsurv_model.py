import numpy as np
import torch
import torch.nn as nn


ACTIVATIONS = {
    "relu": nn.ReLU,
    "elu": nn.ELU,
    "selu": nn.SELU,
    "tanh": nn.Tanh,
    "sigmoid": nn.Sigmoid,
}


def get_activation(name):
    """Instantiate an activation module from its name."""
    try:
        return ACTIVATIONS[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Activation {name} not supported, choose from {sorted(ACTIVATIONS)}"
        ) from None


class FCLayer(nn.Module):
    """Fully connected layer with optional batch norm, dropout, and activation."""
    def __init__(self, in_dim, out_dim, activation=None, batch_norm=False, dropout_rate=0.0,
                 init_fn=nn.init.xavier_normal_):
        super(FCLayer, self).__init__()
        self.fc = nn.Linear(in_dim, out_dim)
        self.batch_norm = nn.BatchNorm1d(out_dim) if batch_norm else None
        self.dropout = nn.Dropout(dropout_rate) if dropout_rate > 0 else None
        self.activation = activation if activation is not None else nn.ReLU()

        if init_fn:
            init_fn(self.fc.weight)
            nn.init.zeros_(self.fc.bias)

    def forward(self, x):
        x = self.fc(x)
        if self.batch_norm:
            x = self.batch_norm(x)
        x = self.activation(x)
        if self.dropout:
            x = self.dropout(x)
        return x


class DNNSurvModel(nn.Module):
    """
    Feed-forward network producing one log hazard ratio per subject.

    Hidden layers are fully connected with a shared activation; the output
    layer is a single linear unit without bias, since a constant shift of the
    log hazard cancels in the Cox partial likelihood.
    """

    def __init__(
        self,
        num_features,
        hidden_sizes=[32, 32],
        activation="relu",
        dropout_rate=0.0,
        batch_norm=False,
    ):
        super(DNNSurvModel, self).__init__()
        if num_features < 1:
            raise ValueError(f"num_features must be positive, got {num_features}")
        self.num_features = num_features
        self.hidden_sizes = list(hidden_sizes)
        self.activation = activation

        layers = []
        prev_dim = num_features
        for h_dim in self.hidden_sizes:
            layers.append(FCLayer(
                prev_dim, h_dim, activation=get_activation(activation),
                batch_norm=batch_norm, dropout_rate=dropout_rate
            ))
            prev_dim = h_dim

        self.hidden = nn.Sequential(*layers)
        self.output_layer = nn.Linear(prev_dim, 1, bias=False)

    def forward(self, x):
        """
        Args:
            x: Tensor of shape (batch_size, num_features)

        Returns
        -------
            risk_scores: Tensor of shape (batch_size, 1)
        """
        x = x.to(dtype=torch.float32)
        if x.dim() != 2 or x.shape[1] != self.num_features:
            raise ValueError(
                f"Expected input of shape (batch_size, {self.num_features}), got {tuple(x.shape)}"
            )
        return self.output_layer(self.hidden(x))

    def predict_risk(self, x, device="cpu"):
        """
        Predict risk scores (log hazard ratios) for each subject.

        Args:
            x (np.ndarray or torch.Tensor): Input features of shape (n_samples, n_features).
            device (str): Device to run the computation on.

        Returns:
            np.ndarray: Array of shape (n_samples,) with risk scores.
        """
        self.eval()

        if isinstance(x, np.ndarray):
            x_tensor = torch.from_numpy(x).float().to(device)
        else:
            x_tensor = x.to(device).float()

        with torch.no_grad():
            risks = self(x_tensor)

        return risks.squeeze(1).cpu().numpy()
