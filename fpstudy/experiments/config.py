"""Study configuration dataclasses and YAML serialization.

A study file names a base seed, an output CSV, and a list of experiments.
Each experiment picks an algorithm and the sweep to run it over:

  - matmul:        sizes, trials, kahan, accumulate_in_fp32
  - fir:           sizes (signal lengths), taps, trials, kahan, accumulate_in_fp32
  - gd_quadratic:  dim, trials, step_size, max_iters, tol, ill_conditioned
  - newton:        function, initials, max_iters, tol

and the precisions to compare. JSON files load too (YAML is a superset).

Example:
    >>> from fpstudy.experiments.config import load_config, save_config
    >>> config = load_config('experiments/configs/smoke.yaml')
    >>> config.experiments[0].algo
    'matmul'
    >>> save_config(config, 'experiments/configs/copy.yaml')
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from fpstudy.experiments.data import NEWTON_FUNCTIONS
from fpstudy.formats.registry import Precision, precision_from_string, precision_to_string

ALGORITHMS = ("matmul", "fir", "gd_quadratic", "newton")

_REQUIRED_FIELDS: Dict[str, tuple] = {
    "matmul": ("sizes", "precisions"),
    "fir": ("sizes", "precisions"),
    "gd_quadratic": ("dim", "precisions"),
    "newton": ("function", "initials", "precisions"),
}


class ConfigError(ValueError):
    """Raised for malformed study configuration."""


def _default_precisions() -> List[str]:
    return [precision_to_string(p) for p in Precision]


@dataclass
class ExperimentConfig:
    """One experiment: an algorithm and the sweep to run it over.

    Attributes:
        algo: Algorithm name (matmul, fir, gd_quadratic, newton)
        precisions: Precision names to compare (fp64 is always the truth run)
        trials: Random problem instances per size

        sizes: Matrix sizes (matmul) or signal lengths (fir)
        taps: Number of FIR filter taps
        kahan: Kahan-compensated reductions
        accumulate_in_fp32: Wide-accumulation settings to sweep

        dim: Problem dimension (gd_quadratic)
        step_size: Gradient descent step
        ill_conditioned: Scale one column of the SPD factor by 1e-6

        max_iters: Iteration budget (None for the kernel default)
        tol: Stopping tolerance (None for the kernel default)

        function: Newton test function name
        initials: Newton starting points
    """

    algo: str
    precisions: List[str] = field(default_factory=_default_precisions)
    trials: int = 1

    # matmul / fir
    sizes: List[int] = field(default_factory=list)
    taps: int = 8
    kahan: bool = False
    accumulate_in_fp32: List[bool] = field(default_factory=lambda: [False])

    # gd_quadratic
    dim: int = 0
    step_size: float = 1e-2
    ill_conditioned: bool = False

    # iterative kernels
    max_iters: Optional[int] = None
    tol: Optional[float] = None

    # newton
    function: str = "x3_minus_2"
    initials: List[float] = field(default_factory=list)

    @property
    def precision_list(self) -> List[Precision]:
        return [precision_from_string(name) for name in self.precisions]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExperimentConfig":
        """Build and validate an experiment from a parsed mapping.

        Raises:
            ConfigError: Unknown algorithm, missing or unknown fields
            UnknownFormatError: Unrecognised precision name
        """
        if "algo" not in data:
            raise ConfigError("Missing required field: algo")
        algo = data["algo"]
        if algo not in ALGORITHMS:
            raise ConfigError(f"Unsupported algo: {algo}")

        for key in _REQUIRED_FIELDS[algo]:
            if key not in data:
                raise ConfigError(f"Missing required field: {key}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown fields for {algo}: {', '.join(unknown)}")

        values = dict(data)
        flags = values.get("accumulate_in_fp32", [False])
        if isinstance(flags, bool):
            flags = [flags]
        if not isinstance(flags, list) or not all(isinstance(flag, bool) for flag in flags):
            raise ConfigError(f"accumulate_in_fp32 must be a bool or list of bools, got {flags!r}")
        values["accumulate_in_fp32"] = list(flags) or [False]

        # YAML 1.1 reads exponents without a dot (1e-6) as strings
        try:
            for key in ("trials", "taps", "dim"):
                if key in values:
                    values[key] = int(values[key])
            for key in ("step_size",):
                if key in values:
                    values[key] = float(values[key])
            if values.get("max_iters") is not None:
                values["max_iters"] = int(values["max_iters"])
            if values.get("tol") is not None:
                values["tol"] = float(values["tol"])
            if "sizes" in values:
                values["sizes"] = [int(size) for size in values["sizes"]]
            if "initials" in values:
                values["initials"] = [float(initial) for initial in values["initials"]]
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric field for {algo}: {e}") from e

        if algo == "newton" and values["function"] not in NEWTON_FUNCTIONS:
            raise ConfigError(f"Unknown Newton function: {values['function']}")

        # Surface UnknownFormatError at load time
        for name in values["precisions"]:
            precision_from_string(name)
        return cls(**values)


@dataclass
class StudyConfig:
    """Complete study: base seed, output CSV, experiments.

    Attributes:
        seed: Base seed every trial seed derives from
        out_csv: Path of the metrics CSV
        experiments: Experiments to run in order
    """

    seed: int
    out_csv: str
    experiments: List[ExperimentConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudyConfig":
        if not isinstance(data, dict):
            raise ConfigError("Study config must be a mapping")
        for key in ("seed", "out_csv", "experiments"):
            if key not in data:
                raise ConfigError(f"Missing required field: {key}")
        return cls(
            seed=int(data["seed"]),
            out_csv=str(data["out_csv"]),
            experiments=[ExperimentConfig.from_dict(e) for e in data["experiments"]],
        )


def save_config(config: StudyConfig, path: str) -> None:
    """Save a study configuration to a YAML file.

    Args:
        config: StudyConfig instance to save
        path: File path for YAML output
    """
    config_dict = asdict(config)
    path_obj = Path(path)
    path_obj.parent.mkdir(parents=True, exist_ok=True)
    with open(path_obj, "w") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)


def load_config(path: str) -> StudyConfig:
    """Load a study configuration from a YAML or JSON file.

    Args:
        path: Path to the configuration file

    Returns:
        Validated StudyConfig

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If the file is malformed
        ConfigError: If required fields are missing or invalid
        UnknownFormatError: If a precision name is not recognised
    """
    with open(path, "r") as f:
        config_dict = yaml.safe_load(f)
    return StudyConfig.from_dict(config_dict)


__all__ = [
    "ALGORITHMS",
    "ConfigError",
    "ExperimentConfig",
    "StudyConfig",
    "load_config",
    "save_config",
]
