"""Layer editing for parallax composites.

Every operation takes a ``ParallaxConfig`` and returns a new one; inputs are
never mutated. Edits are not range-checked; ``config_problems`` reports
out-of-range values when a record is assembled for submission.
"""

from __future__ import annotations

import logging
from typing import Any

from wallstudio.content.models import ParallaxConfig, ParallaxLayer
from wallstudio.errors import CapacityError, MinimumLayerError

logger = logging.getLogger(__name__)

MAX_LAYERS = 3
MIN_LAYERS = 1

CONFIG_RANGES: dict[str, tuple[float, float]] = {
    "sensitivity": (0.1, 1.0),
    "parallax_strength": (10, 50),
}

LAYER_RANGES: dict[str, tuple[float, float]] = {
    "z_index": (1, 3),
    "move_speed": (0.5, 2.0),
    "blur_amount": (0, 10),
    "opacity": (0.1, 1.0),
}

_LAYER_NAMES = {1: "Foreground", 2: "Middle Layer", 3: "Background"}


def default_move_speed(position: int) -> float:
    """Default speed for a layer appended after ``position`` existing layers."""
    if position == 0:
        return 1.0
    return round(max(0.1, 0.8 - 0.2 * position), 2)


def layer_name(z_index: int) -> str:
    return _LAYER_NAMES.get(z_index, f"Layer {z_index}")


def add_layer(config: ParallaxConfig) -> ParallaxConfig:
    """Append a default layer one step further from the viewer.

    Raises:
        CapacityError: If the config already holds ``MAX_LAYERS`` layers.
    """
    count = len(config.layers)
    if count >= MAX_LAYERS:
        raise CapacityError(f"Maximum {MAX_LAYERS} layers allowed for parallax wallpapers")
    layer = ParallaxLayer(
        image_url="",
        z_index=count + 1,
        move_speed=default_move_speed(count),
        blur_amount=0,
        opacity=1.0,
    )
    logger.debug("Adding parallax layer %d (%s)", count + 1, layer_name(layer.z_index))
    return config.model_copy(update={"layers": (*config.layers, layer)})


def remove_layer(config: ParallaxConfig, index: int) -> ParallaxConfig:
    """Drop the layer at ``index``; the others keep their zIndex and settings.

    Raises:
        MinimumLayerError: If only one layer is left.
        IndexError: If ``index`` does not address a layer.
    """
    if len(config.layers) <= MIN_LAYERS:
        raise MinimumLayerError("At least one layer is required")
    _check_index(config, index)
    layers = tuple(layer for i, layer in enumerate(config.layers) if i != index)
    return config.model_copy(update={"layers": layers})


def update_layer(config: ParallaxConfig, index: int, fields: dict[str, Any]) -> ParallaxConfig:
    """Overwrite fields of the layer at ``index``.

    ``fields`` may use either attribute names (``move_speed``) or wire names
    (``moveSpeed``). Values are type-coerced but not range-checked.

    Raises:
        IndexError: If ``index`` does not address a layer.
        KeyError: If a field name is not a layer field.
    """
    _check_index(config, index)
    updates = {_layer_field(key): value for key, value in fields.items()}
    current = config.layers[index]
    replaced = ParallaxLayer.model_validate({**current.model_dump(), **updates})
    layers = tuple(replaced if i == index else layer for i, layer in enumerate(config.layers))
    return config.model_copy(update={"layers": layers})


def config_problems(config: ParallaxConfig) -> list[str]:
    """List everything that keeps ``config`` from being submittable."""
    problems: list[str] = []
    if not config.layers:
        problems.append("parallaxConfig needs at least one layer")
    elif not config.layers[0].image_url.strip():
        problems.append("parallaxConfig.layers[0] needs an image")
    if len(config.layers) > MAX_LAYERS:
        problems.append(f"parallaxConfig allows at most {MAX_LAYERS} layers")

    for name, bounds in CONFIG_RANGES.items():
        label = f"parallaxConfig.{_wire(ParallaxConfig, name)}"
        problem = _range_problem(label, getattr(config, name), bounds)
        if problem:
            problems.append(problem)
    for i, layer in enumerate(config.layers):
        if i > 0 and not layer.image_url.strip():
            # optional layer without an image is dropped on submission
            continue
        for name, bounds in LAYER_RANGES.items():
            label = f"parallaxConfig.layers[{i}].{_wire(ParallaxLayer, name)}"
            problem = _range_problem(label, getattr(layer, name), bounds)
            if problem:
                problems.append(problem)
    return problems


def _check_index(config: ParallaxConfig, index: int) -> None:
    if not 0 <= index < len(config.layers):
        raise IndexError(f"No parallax layer at index {index}")


def _layer_field(key: str) -> str:
    if key in ParallaxLayer.model_fields:
        return key
    for name, info in ParallaxLayer.model_fields.items():
        if info.alias == key:
            return name
    raise KeyError(key)


def _wire(model: type, name: str) -> str:
    return model.model_fields[name].alias or name


def _range_problem(label: str, value: float, bounds: tuple[float, float]) -> str | None:
    low, high = bounds
    if low <= value <= high:
        return None
    return f"{label} {value} outside {low}..{high}"
