# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Transform backends and the dispatcher selecting between them."""

from __future__ import annotations

from .base import OutcomeKind, TransformBackend, TransformOutcome, TransformWarning
from .bridge import BridgeCallError, NodeBridge
from .esbuild import EsbuildBackend
from .registry import (
    DEFAULT_REGISTRY,
    DispatcherState,
    TransformerDispatcher,
    TransformerRegistry,
    is_transformer_name,
)
from .sucrase import SucraseBackend
from .swc import SwcBackend

__all__ = [
    "DEFAULT_REGISTRY",
    "BridgeCallError",
    "DispatcherState",
    "EsbuildBackend",
    "NodeBridge",
    "OutcomeKind",
    "SucraseBackend",
    "SwcBackend",
    "TransformBackend",
    "TransformOutcome",
    "TransformWarning",
    "TransformerDispatcher",
    "TransformerRegistry",
    "is_transformer_name",
]
