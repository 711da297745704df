"""Residual value network for evaluating Tak positions."""

from __future__ import annotations

from pathlib import Path

import torch
from torch import Tensor, nn

from tak_ai.model.config import NetworkConfig


class ResBlock(nn.Module):
    """Residual block: Conv → BN → ReLU → Conv → BN + skip connection.

    残差ブロック（ResNet の基本構成要素）。
    スキップ接続により、深いネットワークでも勾配が流れやすくなる。
    """

    def __init__(self, channels: int) -> None:
        super().__init__()
        # 3×3 畳み込み（padding=1 でサイズを維持）
        self.conv1 = nn.Conv2d(channels, channels, 3, padding=1, bias=False)
        self.bn1 = nn.BatchNorm2d(channels)
        self.conv2 = nn.Conv2d(channels, channels, 3, padding=1, bias=False)
        self.bn2 = nn.BatchNorm2d(channels)

    def forward(self, x: Tensor) -> Tensor:
        residual = x
        out = torch.relu(self.bn1(self.conv1(x)))
        out = self.bn2(self.conv2(out))
        out = torch.relu(out + residual)  # 入力を加算してから ReLU
        return out


class ValueNetwork(nn.Module):
    """Convolutional tower with a single value head.

    AlphaZero の価値ヘッドだけを持つネットワーク。
    Tak はスライド手の数が局面ごとに大きく変わり、固定の行動空間を持たないため
    方策ヘッドは使わず、αβ探索の静的評価関数として使う。

    Input:  (batch, in_channels, board_size, board_size)
    Output: (batch, 1), a tanh-bounded value in [-1, 1] for the side to move
    """

    def __init__(self, config: NetworkConfig) -> None:
        super().__init__()
        self.config = config
        n = config.board_size

        self.input_conv = nn.Conv2d(
            config.in_channels,
            config.num_channels,
            3,
            padding=1,
            bias=False,
        )
        self.input_bn = nn.BatchNorm2d(config.num_channels)

        self.res_blocks = nn.Sequential(
            *[ResBlock(config.num_channels) for _ in range(config.num_res_blocks)]
        )

        # 価値ヘッド: 1×1 畳み込みで1チャンネルに削減してから全結合層へ
        self.value_conv = nn.Conv2d(config.num_channels, 1, 1, bias=False)
        self.value_bn = nn.BatchNorm2d(1)
        self.value_fc1 = nn.Linear(n * n, config.value_hidden)
        self.value_fc2 = nn.Linear(config.value_hidden, 1)

    def forward(self, x: Tensor) -> Tensor:
        x = torch.relu(self.input_bn(self.input_conv(x)))
        x = self.res_blocks(x)

        v = torch.relu(self.value_bn(self.value_conv(x)))
        v = v.view(v.size(0), -1)  # フラット化: (batch, n*n)
        v = torch.relu(self.value_fc1(v))
        return torch.tanh(self.value_fc2(v))  # tanh で [-1, +1] に収める


def load_network(path: str | Path, config: NetworkConfig) -> ValueNetwork:
    """Build a network from saved weights and switch it to inference mode."""
    net = ValueNetwork(config)
    state_dict = torch.load(str(path), map_location="cpu", weights_only=True)
    net.load_state_dict(state_dict)
    net.eval()
    return net
