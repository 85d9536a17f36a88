from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEFAULT_INPUT_NAME = "image"
DEFAULT_OUTPUT_NAME = "grid"


@dataclass(frozen=True)
class OnnxRuntimeBackendConfig:
    """
    Configuration for ONNX Runtime inference.

    - providers: ORT execution providers (e.g., ["CUDAExecutionProvider", "CPUExecutionProvider"])
    - input_name/output_name: override I/O names; by default "image"/"grid" are
      used when the model has them, else the first input/output
    """

    providers: Optional[Sequence[str]] = None
    input_name: Optional[str] = None
    output_name: Optional[str] = None


def _pick_name(wanted: Optional[str], preferred: str, available: Sequence[str], kind: str) -> str:
    if wanted is not None:
        if wanted not in available:
            raise ValueError(f"Model has no {kind} named {wanted!r} (available: {list(available)})")
        return wanted
    if preferred in available:
        return preferred
    return available[0]


class OnnxRuntimeBackend:
    """
    ONNX Runtime session for a YOLOv2 grid model.

    Expects an NCHW float32 blob, (1, 3, 416, 416) for Tiny YOLOv2, and
    returns the raw grid output, (1, 125, 13, 13), as a NumPy array.
    """

    def __init__(self, model_path: PathLike, cfg: OnnxRuntimeBackendConfig = OnnxRuntimeBackendConfig()):
        try:
            import onnxruntime as ort  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "onnxruntime is required for the ONNX backend. Install it with `pip install onnxruntime` "
                "(or `onnxruntime-gpu`)."
            ) from e

        self._ort = ort
        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(str(self.model_path))

        sess_opts = ort.SessionOptions()
        providers = list(cfg.providers) if cfg.providers is not None else None
        self.session = ort.InferenceSession(str(self.model_path), sess_options=sess_opts, providers=providers)

        inputs = [i.name for i in self.session.get_inputs()]
        outputs = [o.name for o in self.session.get_outputs()]
        self.input_name = _pick_name(cfg.input_name, DEFAULT_INPUT_NAME, inputs, "input")
        self.output_name = _pick_name(cfg.output_name, DEFAULT_OUTPUT_NAME, outputs, "output")
        logger.info(
            "Loaded %s (input=%s, output=%s, providers=%s)",
            self.model_path.name,
            self.input_name,
            self.output_name,
            ",".join(self.providers_in_use),
        )

    @property
    def providers_in_use(self) -> Sequence[str]:
        return tuple(self.session.get_providers())

    @property
    def available_providers(self) -> Sequence[str]:
        return tuple(self._ort.get_available_providers())

    def infer(self, blob: np.ndarray, extra_inputs: Optional[Dict[str, Any]] = None) -> np.ndarray:
        inputs: Dict[str, Any] = {self.input_name: blob}
        if extra_inputs:
            inputs.update(extra_inputs)
        outputs = self.session.run([self.output_name], inputs)
        return outputs[0]
